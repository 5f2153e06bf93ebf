"""DRIMS – research output tracking and approval workflow."""
