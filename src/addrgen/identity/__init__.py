"""Local synthetic identity generation."""
