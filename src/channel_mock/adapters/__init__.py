"""Reference channel adapters: JSON codec, in-process messenger, method channel."""
