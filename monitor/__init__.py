# Monitor module
