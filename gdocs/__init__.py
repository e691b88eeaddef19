"""
Google Docs MCP Integration

This package converts Google Docs to and from Markdown and edits documents
relative to their headings.
"""
