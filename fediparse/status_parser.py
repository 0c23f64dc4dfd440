"""Parses an incoming ActivityPub post into validated fields for storage.

Usage::

  parser = StatusParser(activity_json,
                        actor_uri='https://example.com/users/alice',
                        followers_collection='https://example.com/users/alice/followers')
  parser.text(), parser.language(), parser.quote_policy(), ...

The input is untrusted JSON from a remote server, compacted or expanded
JSON-LD. Missing or malformed fields come back as None or empty values, never
as exceptions. The only exception is a caller mistake, eg asking for the quote
policy without telling us who sent the post.

No I/O happens here. Remote collections that aren't inlined, eg ``likes``, are
reported as unknown rather than fetched.
"""
from datetime import timezone
from functools import cached_property
import logging

import dateutil.parser
from oauth_dropins.webutil import util

from . import as2, interaction_policy, languages, render
from .jsonld import Node

logger = logging.getLogger(__name__)

# fields checked for a quoted post's URI, in priority order
# https://codeberg.org/fediverse/fep/src/branch/main/fep/044f/fep-044f.md
# https://misskey-hub.net/ns#_misskey_quote
QUOTE_FIELDS = ('quote', 'quoteUrl', 'quoteUri', '_misskey_quote')


def parse_timestamp(val):
  """Parses an ISO 8601 timestamp into an aware UTC datetime.

  Timestamps without a timezone are assumed to be UTC.

  Returns:
    datetime: or None if ``val`` is missing or unparsable
  """
  if not val or not isinstance(val, str):
    return None

  try:
    dt = dateutil.parser.isoparse(val.strip())
  except (ValueError, OverflowError):
    logger.debug(f'Ignoring unparsable timestamp {val!r}')
    return None

  if not dt.tzinfo:
    return dt.replace(tzinfo=timezone.utc)

  try:
    return dt.astimezone(timezone.utc)
  except OverflowError:
    logger.debug(f'Ignoring out of range timestamp {val!r}')
    return None


class StatusParser(object):
  """Derives post fields from an ActivityPub activity or object.

  Each method is computed on demand from the same :class:`jsonld.Node`.
  Intermediate values are memoized on the instance.

  Attributes:
    json (dict): the decoded activity or object
    activity (jsonld.Node): the outer document
    object (jsonld.Node): the post. The activity's ``object`` if it has one,
      otherwise the document itself.
    actor_uri (str): the sending actor's canonical URI
    followers_collection (str): the sending actor's followers collection URI
    default_language (str): language preferred when ``contentMap`` has several
    default_quote_policy (int): returned by :meth:`quote_policy` when the post
      has no interaction policy
  """

  def __init__(self, json, actor_uri=None, followers_collection=None,
               default_language=None,
               default_quote_policy=interaction_policy.DEFAULT_QUOTE_POLICY):
    """Constructor.

    Args:
      json (dict or list): decoded JSON-LD document. Expanded documents may be
        a list; the first object is used.
      actor_uri (str): optional, required by :meth:`quote_policy`
      followers_collection (str): optional
      default_language (str): optional
      default_quote_policy (int): optional

    Raises:
      ValueError: if ``json`` isn't a JSON object or a list of them
    """
    if isinstance(json, list):
      if not any(isinstance(elem, dict) for elem in json):
        raise ValueError(f'Expected a list with a JSON object, got {json!r}')
    elif not isinstance(json, dict):
      raise ValueError(f'Expected dict, got {json!r}')

    self.json = json
    self.actor_uri = actor_uri
    self.followers_collection = followers_collection
    self.default_language = default_language
    self.default_quote_policy = default_quote_policy

    self.activity = Node(json)
    if self.activity.values('object'):
      self.object = self.activity.node_or_reference('object') or Node({}, self.activity.form)
    else:
      self.object = self.activity

  def __repr__(self):
    return f'StatusParser({self.object!r})'

  #
  # identity and type
  #
  def uri(self):
    """Returns the post's id if it's a URL, otherwise None."""
    id = self.object.id_value
    return id if id and util.is_url(id) else None

  def activity_type(self):
    """Returns the outer activity's type, eg ``Create``, or None if the
    document is a bare object."""
    return self.activity.type if self.object is not self.activity else None

  def object_type(self):
    """Returns the post's type, eg ``Note`` or ``Article``."""
    return self.object.type

  def actor(self):
    """Returns the sending actor's id: the activity's ``actor``, falling back to
    the object's ``attributedTo``."""
    return self.activity.id('actor') or self.object.id('attributedTo')

  #
  # text
  #
  @cached_property
  def _content_map(self):
    content_map = {}
    for lang, text in self.object.lang_map('content').items():
      tag = languages.normalize_language(lang)
      if tag and text.strip():
        content_map.setdefault(tag, text)
    return content_map

  def content_by_language(self):
    """Returns ``contentMap`` as a dict with lowercased language tag keys."""
    return dict(self._content_map)

  def language(self):
    """Returns the content's language tag, eg ``en``, or None."""
    return languages.select_language(self._content_map,
                                     default=self.default_language)

  def plain_content(self):
    """Returns the content in :meth:`language`, falling back to ``content``."""
    lang = self.language()
    if lang:
      return self._content_map[lang]
    return self.object.str('content')

  text = plain_content

  def title(self):
    name = self.object.str('name')
    if name:
      return name
    names = self.object.lang_map('name')
    return next(iter(names.values()), None) if names else None

  def summary(self):
    """Returns the summary, aka content warning or spoiler text."""
    summary = self.object.str('summary')
    if summary:
      return summary
    summaries = self.object.lang_map('summary')
    return next(iter(summaries.values()), None) if summaries else None

  spoiler_text = summary

  def processed_text(self):
    """Returns the display HTML for the post's type. See :mod:`render`."""
    return render.render(self.object_type(), title=self.title(),
                         summary=self.summary(), content=self.plain_content(),
                         url=self.canonical_url())

  def plain_text(self):
    """Returns :meth:`processed_text` converted to plain text."""
    return render.html_to_text(self.processed_text())

  def sensitive(self):
    return bool(self.object.bool('sensitive'))

  #
  # timestamps, links
  #
  def published_at(self):
    return parse_timestamp(self.object.str('published'))

  def updated_at(self):
    return parse_timestamp(self.object.str('updated'))

  def canonical_url(self):
    """Returns the post's ``url``, preferring an HTML link if there are
    several."""
    href = as2.url_to_href(self.object.links('url'))
    return href if href and util.is_url(href) else None

  url = canonical_url

  def in_reply_to(self):
    return self.object.id('inReplyTo')

  def quote_uri(self):
    """Returns the URI of the post this one quotes, or None.

    Checks the quote fields that various servers use, then FEP-e232 object
    links in ``tag``.
    """
    for field in QUOTE_FIELDS:
      uri = self.object.id(field)
      if uri:
        return uri

    for tag in self.object.nodes('tag'):
      if (tag.has_type('Link')
          and tag.str('mediaType') in as2.QUOTE_LINK_MEDIA_TYPES):
        href = tag.id('href')
        if href:
          return href

    return None

  #
  # audience
  #
  @cached_property
  def _to(self):
    return self.object.ids('to') or self.activity.ids('to')

  @cached_property
  def _cc(self):
    return self.object.ids('cc') or self.activity.ids('cc')

  def recipients(self):
    """Returns the deduplicated union of ``to`` and ``cc``, sorted."""
    return sorted(set(self._to + self._cc))

  def is_public(self):
    return as2.is_public(self.recipients())

  def addressed_followers(self):
    return bool(self.followers_collection
                and self.followers_collection in self.recipients())

  def is_reply(self):
    return self.in_reply_to() is not None

  reply = is_reply

  def visibility(self):
    """Returns ``public``, ``unlisted``, ``private``, or ``direct``.

    https://docs.joinmastodon.org/spec/activitypub/#to-cc
    """
    if as2.is_public(self._to):
      return 'public'
    elif as2.is_public(self._cc):
      return 'unlisted'
    elif self.addressed_followers():
      return 'private'
    return 'direct'

  #
  # tags and attachments
  #
  def mentions(self):
    """Returns the ``href`` of each ``Mention`` tag, deduplicated, in order."""
    hrefs = [tag.id('href') for tag in self.object.nodes('tag')
             if tag.has_type('Mention')]
    return list(dict.fromkeys(href for href in hrefs if href))

  def hashtags(self):
    """Returns each ``Hashtag`` tag's name, lowercased, without ``#``."""
    names = []
    for tag in self.object.nodes('tag'):
      if tag.has_type('Hashtag'):
        name = (tag.str('name') or '').strip().lstrip('#').lower()
        if name and name not in names:
          names.append(name)
    return names

  def attachments(self):
    """Returns media attachments as dicts with ``url``, ``media_type``,
    ``description``. Attachments without a URL are dropped."""
    attachments = []
    for att in self.object.nodes('attachment'):
      url = as2.url_to_href(att.links('url'), media_type=att.str('mediaType'))
      if not url:
        url = att.id('href')
      if not (url and util.is_url(url)):
        logger.debug(f'Dropping attachment without URL: {att!r}')
        continue
      attachments.append(util.trim_nulls({
        'url': url,
        'media_type': att.str('mediaType'),
        'description': att.str('name') or att.str('summary'),
      }))
    return attachments

  #
  # collections
  #
  def _collection_count(self, field):
    """Returns an inlined collection's ``totalItems``, or None if the
    collection is missing, a bare URI, or has no count."""
    collection = self.object.node(field)
    return collection.int('totalItems') if collection else None

  def favourites_reference(self):
    return self._collection_count('likes')

  favourites_count = favourites_reference

  def reblogs_count(self):
    return self._collection_count('shares')

  def replies_count(self):
    return self._collection_count('replies')

  #
  # interaction policy
  #
  def quote_policy(self):
    """Returns the quote permission flags. See :mod:`interaction_policy`.

    Raises:
      ValueError: if this parser was constructed without ``actor_uri``
    """
    if not self.actor_uri:
      raise ValueError('quote_policy requires actor_uri')

    actor = self.actor()
    if actor and actor != self.actor_uri:
      logger.warning(f"Activity actor {actor} doesn't match expected sender {self.actor_uri}")

    # a policy that's present but empty or malformed approves nobody
    policy = None
    if self.object.values('interactionPolicy'):
      policy = self.object.node('interactionPolicy') or Node({}, self.object.form)

    return interaction_policy.quote_policy(
      policy,
      followers_collection=self.followers_collection,
      default=self.default_quote_policy)

  def attributes(self):
    """Returns all derived fields as a dict, for storage. Nulls are trimmed.

    The quote policy is only included if ``actor_uri`` was provided.
    """
    attrs = {
      'uri': self.uri(),
      'url': self.canonical_url(),
      'type': self.object_type(),
      'text': self.text(),
      'language': self.language(),
      'spoiler_text': self.spoiler_text(),
      'title': self.title(),
      'processed_text': self.processed_text(),
      'created_at': self.published_at(),
      'edited_at': self.updated_at(),
      'reply': self.is_reply(),
      'in_reply_to': self.in_reply_to(),
      'sensitive': self.sensitive(),
      'visibility': self.visibility(),
      'mentions': self.mentions(),
      'hashtags': self.hashtags(),
      'attachments': self.attachments(),
      'quote_uri': self.quote_uri(),
      'favourites_count': self.favourites_count(),
      'reblogs_count': self.reblogs_count(),
      'replies_count': self.replies_count(),
    }
    if self.actor_uri:
      attrs['quote_policy'] = self.quote_policy()

    return util.trim_nulls(attrs)
