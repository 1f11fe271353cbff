"""opentv - catalog and query core for a personal IPTV channel manager."""
