"""SQLAlchemy persistence for user records."""
