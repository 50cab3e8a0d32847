"""Projects, project permissions, their services, command handlers and SQLite store."""