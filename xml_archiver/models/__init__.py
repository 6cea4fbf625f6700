"""Value types shared across the archiver."""
