"""Uniform field access over compacted and expanded JSON-LD.

ActivityPub documents arrive in one of two shapes:

* compacted, eg ``{"content": "hi", "to": "https://x/followers"}``
* expanded, eg
  ``{"https://www.w3.org/ns/activitystreams#content": [{"@value": "hi"}]}``

:class:`Node` hides the difference. It picks a strategy once per document with
:func:`detect_form` and every nested node inherits it. Lookups never raise on
unexpected shapes; they return ``None`` or an empty container instead, since
malformed input from remote servers is routine.

We only know a fixed vocabulary. There's no remote ``@context`` resolution.
* https://www.w3.org/TR/json-ld11/#compacted-document-form
* https://www.w3.org/TR/json-ld11/#expanded-document-form
"""
import logging

logger = logging.getLogger(__name__)

AS = 'https://www.w3.org/ns/activitystreams#'
# https://docs.gotosocial.org/en/latest/federation/interaction_policy/
GTS = 'https://gotosocial.org/ns#'
MISSKEY = 'https://misskey-hub.net/ns#'
FEDIBIRD = 'http://fedibird.com/ns#'
# https://codeberg.org/fediverse/fep/src/branch/main/fep/044f/fep-044f.md
FEP_044F = 'https://w3id.org/fep/044f#'
XSD = 'http://www.w3.org/2001/XMLSchema#'

PREFIXES = {
  'as': AS,
  'fedibird': FEDIBIRD,
  'gts': GTS,
  'misskey': MISSKEY,
  'xsd': XSD,
}

# maps logical field name to expanded IRI
VOCABULARY = {
  '_misskey_quote': MISSKEY + '_misskey_quote',
  'actor': AS + 'actor',
  'attachment': AS + 'attachment',
  'attributedTo': AS + 'attributedTo',
  'automaticApproval': GTS + 'automaticApproval',
  'canQuote': GTS + 'canQuote',
  'cc': AS + 'cc',
  'content': AS + 'content',
  'href': AS + 'href',
  'inReplyTo': AS + 'inReplyTo',
  'interactionPolicy': GTS + 'interactionPolicy',
  'likes': AS + 'likes',
  'manualApproval': GTS + 'manualApproval',
  'mediaType': AS + 'mediaType',
  'name': AS + 'name',
  'object': AS + 'object',
  'published': AS + 'published',
  'quote': FEP_044F + 'quote',
  'quoteUri': FEDIBIRD + 'quoteUri',
  'quoteUrl': AS + 'quoteUrl',
  'replies': AS + 'replies',
  'sensitive': AS + 'sensitive',
  'shares': AS + 'shares',
  'summary': AS + 'summary',
  'tag': AS + 'tag',
  'to': AS + 'to',
  'totalItems': AS + 'totalItems',
  'updated': AS + 'updated',
  'url': AS + 'url',
}
IRIS = frozenset(VOCABULARY.values())

INTEGER_TYPES = frozenset(XSD + t for t in (
  'integer', 'int', 'long', 'nonNegativeInteger', 'unsignedInt',
))


def short_name(iri):
  """Returns the short name for a type or term IRI, eg ``Note`` for
  ``https://www.w3.org/ns/activitystreams#Note`` or ``as:Note``.

  Unknown IRIs are returned unchanged.
  """
  if not isinstance(iri, str):
    return None

  for prefix, ns in PREFIXES.items():
    if iri.startswith(ns):
      return iri[len(ns):]
    elif iri.startswith(f'{prefix}:'):
      return iri[len(prefix) + 1:]

  return iri


def flatten(val):
  """Returns a JSON-LD value as a list.

  ``None`` is empty, lists and tuples are returned as lists, ``@list`` and
  ``@set`` containers are unwrapped, anything else is wrapped.
  """
  if val is None:
    return []
  elif isinstance(val, (list, tuple)):
    return [elem for v in val for elem in flatten(v)]
  elif isinstance(val, dict):
    for container in '@list', '@set':
      if container in val:
        return flatten(val[container])

  return [val]


def is_value_object(val):
  return isinstance(val, dict) and '@value' in val


class CompactedForm(object):
  """Short keys, bare scalars, ``{name}Map`` for language maps."""
  NAME = 'compacted'

  def keys(self, name):
    iri = VOCABULARY.get(name)
    keys = [name]
    if iri:
      keys += [f'{prefix}:{iri[len(ns):]}' for prefix, ns in PREFIXES.items()
               if iri.startswith(ns)]
      keys.append(iri)
    return keys

  def literal(self, val):
    return val.get('@value') if is_value_object(val) else val

  def reference(self, val):
    if isinstance(val, dict) and not is_value_object(val):
      val = val.get('id') or val.get('@id')
    return val if isinstance(val, str) and val else None

  def node_id(self, data):
    return self.reference(data)

  def types(self, data):
    return flatten(data.get('type')) + flatten(data.get('@type'))

  def language_map(self, node, name):
    for lang_map in node.values(f'{name}Map'):
      if isinstance(lang_map, dict):
        return {lang: text for lang, text in lang_map.items()
                if isinstance(text, str)}
    return {}


class ExpandedForm(object):
  """IRI keys, every value wrapped in a list of ``@value`` or ``@id`` nodes."""
  NAME = 'expanded'

  def keys(self, name):
    return [VOCABULARY.get(name, name)]

  def literal(self, val):
    if isinstance(val, dict):
      return val.get('@value')
    # not valid expanded JSON-LD, but harmless to accept
    return val

  def reference(self, val):
    if isinstance(val, dict):
      val = val.get('@id')
    return val if isinstance(val, str) and val else None

  def node_id(self, data):
    return self.reference(data)

  def types(self, data):
    return flatten(data.get('@type'))

  def language_map(self, node, name):
    lang_map = {}
    for val in node.values(name):
      if (is_value_object(val) and isinstance(val.get('@language'), str)
          and isinstance(val['@value'], str)):
        lang_map.setdefault(val['@language'], val['@value'])
    return lang_map


COMPACTED = CompactedForm()
EXPANDED = ExpandedForm()


def detect_form(data):
  """Returns :data:`EXPANDED` or :data:`COMPACTED` for a decoded document.

  Top-level expanded documents are usually lists. A dict is expanded if it has
  no ``@context`` and at least one key is a known vocabulary IRI.
  """
  if isinstance(data, list):
    return EXPANDED
  elif (isinstance(data, dict) and '@context' not in data
        and not IRIS.isdisjoint(data.keys())):
    return EXPANDED
  return COMPACTED


class Node(object):
  """A JSON-LD node with typed, shape-agnostic field lookups.

  Attributes:
    data (dict): the underlying JSON object. Non-dicts are replaced with ``{}``.
    form: :data:`COMPACTED` or :data:`EXPANDED`
  """

  def __init__(self, data, form=None):
    if form is None:
      form = detect_form(data)
    if isinstance(data, list):
      data = next((elem for elem in data if isinstance(elem, dict)), None)
    if data is not None and not isinstance(data, dict):
      logger.debug(f'Expected JSON object, got {data.__class__.__name__}')
    self.data = data if isinstance(data, dict) else {}
    self.form = form

  def __repr__(self):
    return f'Node({self.form.NAME}, {self.id_value!r})'

  def __bool__(self):
    return bool(self.data)

  @property
  def id_value(self):
    """The node's own ``id``, or None."""
    return self.form.node_id(self.data)

  def reference_node(self, uri):
    """Returns a node in this document's form that only has an id."""
    key = '@id' if self.form is EXPANDED else 'id'
    return Node({key: uri}, self.form)

  def types(self):
    """Returns this node's types as short names, eg ``['Note']``."""
    return [short_name(t) for t in self.form.types(self.data)
            if isinstance(t, str)]

  @property
  def type(self):
    types = self.types()
    return types[0] if types else None

  def has_type(self, type):
    return type in self.types()

  def values(self, name):
    """Returns all raw values of a field, flattened to a list."""
    for key in self.form.keys(name):
      if key in self.data:
        return flatten(self.data[key])
    return []

  def literals(self, name):
    """Returns all literal values without a language tag."""
    return [self.form.literal(val) for val in self.values(name)
            if not (isinstance(val, dict) and '@language' in val)]

  def str(self, name):
    """Returns the first non-blank string value of a field, or None."""
    for val in self.literals(name):
      if isinstance(val, str) and val.strip():
        return val
    return None

  def bool(self, name):
    for val in self.literals(name):
      if isinstance(val, bool):
        return val
    return None

  def int(self, name):
    """Returns the first non-negative integer value of a field, or None.

    Booleans don't count. Strings only count if they're ASCII digits typed as
    an xsd integer, which happens in expanded documents.
    """
    for val in self.values(name):
      literal = self.form.literal(val)
      if isinstance(literal, bool):
        continue
      elif isinstance(literal, int):
        return literal if literal >= 0 else None
      elif (isinstance(literal, str) and literal.isascii() and literal.isdigit()
            and isinstance(val, dict) and val.get('@type') in INTEGER_TYPES):
        return int(literal)
    return None

  def ids(self, name):
    """Returns the references in a field: bare strings or nodes' ids."""
    return [ref for ref in (self.form.reference(val) for val in self.values(name))
            if ref]

  def id(self, name):
    ids = self.ids(name)
    return ids[0] if ids else None

  def nodes(self, name):
    """Returns the embedded nodes in a field. Bare references are skipped."""
    return [Node(val, self.form) for val in self.values(name)
            if isinstance(val, dict) and not is_value_object(val)]

  def node(self, name):
    nodes = self.nodes(name)
    return nodes[0] if nodes else None

  def node_or_reference(self, name):
    """Returns the first value of a field as a node, even if it's a bare URI."""
    for val in self.values(name):
      if isinstance(val, dict) and not is_value_object(val):
        return Node(val, self.form)
      ref = self.form.reference(val)
      if ref:
        return self.reference_node(ref)
    return None

  def lang_map(self, name):
    """Returns a field's language-tagged strings as a dict, tag to text."""
    return self.form.language_map(self, name)

  def links(self, name):
    """Returns ``(href, media type)`` tuples for a field's links.

    Values may be bare URIs, references, or ``Link`` nodes with ``href``. Media
    type is None if unknown.
    """
    links = []
    for val in self.values(name):
      if isinstance(val, dict) and not is_value_object(val):
        link = Node(val, self.form)
        href = link.id('href') or link.id_value
        if href:
          links.append((href, link.str('mediaType')))
      else:
        ref = self.form.reference(self.form.literal(val))
        if ref:
          links.append((ref, None))
    return links
