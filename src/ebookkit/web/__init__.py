"""Web API for ebook upload, listing and download."""
