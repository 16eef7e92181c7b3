"""HTTP control surface for a running mission."""
