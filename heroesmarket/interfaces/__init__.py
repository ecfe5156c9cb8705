"""User-facing interfaces over the service layer."""
