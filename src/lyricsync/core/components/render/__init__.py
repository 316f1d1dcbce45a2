"""Still-frame rendering of timeline states."""
