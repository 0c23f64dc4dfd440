"""fediparse: parses incoming ActivityPub posts.

See status_parser.StatusParser.
"""
