"""Calculator version stamped on every quote."""

VERSION = "2025.11.20"
