"""ActivityStreams 2 and ActivityPub constants and audience helpers.

* http://www.w3.org/TR/activitystreams-core/
* https://www.w3.org/TR/activitypub/
* https://docs.joinmastodon.org/spec/activitypub/
"""
# ActivityPub Content-Type details:
# https://www.w3.org/TR/activitypub/#retrieving-objects
CONTENT_TYPE = 'application/activity+json'
CONTENT_TYPE_LD_PROFILE = 'application/ld+json; profile="https://www.w3.org/ns/activitystreams"'
CONTENT_TYPE_HTML = 'text/html'

PUBLIC_AUDIENCE = 'https://www.w3.org/ns/activitystreams#Public'
# All known Public values, cargo culted from:
# https://socialhub.activitypub.rocks/t/visibility-to-cc-mapping/284
# https://docs.joinmastodon.org/spec/activitypub/#properties-used
PUBLICS = frozenset((
  PUBLIC_AUDIENCE,
  'as:Public',
  'Public',
))

# FEP-e232 object links to quoted posts use one of these media types
# https://codeberg.org/fediverse/fep/src/branch/main/fep/e232/fep-e232.md
QUOTE_LINK_MEDIA_TYPES = frozenset((
  CONTENT_TYPE,
  CONTENT_TYPE_LD_PROFILE,
))


def is_public(audience):
  """Returns True if any of the given audience ids is the public collection.

  Args:
    audience (sequence of str): ids from ``to`` and/or ``cc``

  Returns:
    bool:
  """
  if isinstance(audience, str):
    audience = [audience]
  return bool(PUBLICS.intersection(audience or ()))


def url_to_href(links, media_type=CONTENT_TYPE_HTML):
  """Picks one href from a list of links, preferring the given media type.

  Args:
    links (sequence of tuple): ``(href, media type)`` pairs, as returned by
      :meth:`jsonld.Node.links`
    media_type (str)

  Returns:
    str: href, or None if there are no links
  """
  for href, type in links:
    if type == media_type:
      return href

  return links[0][0] if links else None
