"""tiershift - interactive console for moving S3 objects between storage classes."""
