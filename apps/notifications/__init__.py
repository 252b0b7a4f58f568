"""Notifications app: in-app feed and e-mail delivery driven by booking events."""
