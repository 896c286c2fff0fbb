"""SiteWatch - website uptime monitoring service."""
