"""Context-gathering modules for release notes.

These modules talk to the outside world (the GitHub REST API and local
git checkouts) and hand back the typed records the generator works with.
"""
