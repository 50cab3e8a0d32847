"""Tags, the tag service and command handlers for tagging test runs."""