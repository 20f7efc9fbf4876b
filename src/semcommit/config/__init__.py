"""Application and repository configuration."""
