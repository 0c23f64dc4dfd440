"""Language tag normalization and selection for ``contentMap``.

Tags are BCP 47-ish, eg ``en``, ``pt-br``, ``zh-hant-tw``. We lowercase them and
don't validate subtags against the registry.
https://www.rfc-editor.org/rfc/bcp/bcp47.txt
"""
import logging
import re

logger = logging.getLogger(__name__)

LANGUAGE_TAG_RE = re.compile(r'^[a-z]{2,3}(-[a-z0-9]{1,8})*$')


def normalize_language(tag):
  """Returns a lowercased language tag, or None if it doesn't look like one.

  Underscores are converted to hyphens, eg ``pt_BR`` becomes ``pt-br``.
  """
  if not isinstance(tag, str):
    return None

  normalized = tag.strip().lower().replace('_', '-')
  if not LANGUAGE_TAG_RE.match(normalized):
    logger.debug(f'Ignoring invalid language tag {tag!r}')
    return None

  return normalized


def primary_subtag(tag):
  return tag.split('-')[0]


def select_language(content_map, default=None):
  """Picks one language from a map of normalized tag to content.

  One key wins outright. With several, prefer ``default``, then a key with the
  same primary subtag as ``default``, then the lexicographically first key.

  Args:
    content_map (dict): normalized language tag to content
    default (str): recipient's or server's default language, optional

  Returns:
    str: language tag, or None if ``content_map`` is empty
  """
  tags = sorted(content_map or ())
  if not tags:
    return None
  elif len(tags) == 1:
    return tags[0]

  default = normalize_language(default)
  if default:
    if default in content_map:
      return default
    for tag in tags:
      if primary_subtag(tag) == primary_subtag(default):
        return tag

  return tags[0]
