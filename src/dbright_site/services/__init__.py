"""Service layer: storage, access control, intake, moderation and export."""
