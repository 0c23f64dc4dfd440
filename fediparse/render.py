"""Renders post bodies for content types that aren't microblog posts.

Notes are shown as is. Articles, pages and events get their title, summary and
a link back to the original composed into the body, since most microblog
clients only display ``content``. Each type is a row in :data:`RENDERERS`.
"""
from html import escape, unescape
import logging
import re

import html2text

logger = logging.getLogger(__name__)

SECTION_SEPARATOR = '\n\n'


def heading(title=None, **kwargs):
  return title and f'<h2>{escape(title, quote=False)}</h2>'


def summary(summary=None, **kwargs):
  return summary


def body(content=None, **kwargs):
  return content


def link(url=None, **kwargs):
  if url:
    url = escape(url)
    return f'<p><a href="{url}">{url}</a></p>'


SECTIONS = {
  'heading': heading,
  'summary': summary,
  'body': body,
  'link': link,
}

# maps object type to the sections rendered for it, in order
RENDERERS = {
  'Note': ('body',),
  'Article': ('heading', 'summary', 'body', 'link'),
  'Page': ('heading', 'body', 'link'),
  'Event': ('heading', 'body', 'link'),
}
DEFAULT_RENDERER = ('body',)


def render(type, title=None, summary=None, content=None, url=None):
  """Renders a post's display HTML.

  Sections whose fields are missing are left out entirely.

  Args:
    type (str): AS2 object type, eg ``Article``
    title (str): ``name``, plain text
    summary (str): HTML
    content (str): HTML body
    url (str): link to the original

  Returns:
    str: HTML, possibly empty
  """
  fields = {
    'title': title,
    'summary': summary,
    'content': content,
    'url': url,
  }
  rendered = [SECTIONS[name](**fields) for name in RENDERERS.get(type, DEFAULT_RENDERER)]
  return SECTION_SEPARATOR.join(section for section in rendered if section)


# HTML2Text attributes for unwrapped plain text output
TEXT_OPTIONS = {
  'body_width': 0,
  'ignore_emphasis': True,
  'ignore_images': True,
  'ignore_links': True,
  'unicode_snob': True,
  'use_automatic_links': False,
}

# html2text backslash-escapes leading dots, pluses and dashes, which only
# matter in markdown. it reads these patterns from its config module, so they're
# replaced once here with ones that never match. html2text substitutes
# \1\\\2, so they need two groups.
html2text.config.RE_MD_DOT_MATCHER = \
  html2text.config.RE_MD_PLUS_MATCHER = \
  html2text.config.RE_MD_DASH_MATCHER = \
    re.compile(r'(?!)()()')


def html_to_text(html, **options):
  """Converts HTML to plain text.

  Args:
    html (str)
    options: overrides for :data:`TEXT_OPTIONS`

  Returns:
    str: possibly empty
  """
  if not html:
    return ''

  converter = html2text.HTML2Text()
  for key, val in {**TEXT_OPTIONS, **options}.items():
    setattr(converter, key, val)

  text = unescape(converter.handle(html)).strip()
  return '\n'.join(line.rstrip() for line in text.splitlines())
