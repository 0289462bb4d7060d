"""Fetchers for the four datasets the enrichment pipeline joins."""
