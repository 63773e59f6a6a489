"""logvault — persistent logging handler backed by an embedded SQLite store."""
