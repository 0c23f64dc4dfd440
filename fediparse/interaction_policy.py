"""Evaluates GoToSocial-style interaction policies into quote permission flags.

https://docs.gotosocial.org/en/latest/federation/interaction_policy/

A policy looks like::

  "interactionPolicy": {
    "canQuote": {
      "automaticApproval": "https://example.com/users/alice/followers",
      "manualApproval": "https://www.w3.org/ns/activitystreams#Public"
    }
  }

The result packs two sets of identity classes into one int. The low 16 bits
are the classes whose quotes need manual approval, the high 16 bits are the
classes whose quotes are approved automatically. 0 means nobody may quote.
"""
import logging

from . import as2

logger = logging.getLogger(__name__)

# one bit per identity class. append new classes, never renumber.
POLICY_FLAGS = {
  'unknown': 1 << 0,
  'public': 1 << 1,
  'followers': 1 << 2,
  'following': 1 << 3,
}
AUTOMATIC_SHIFT = 16
HALF_MASK = (1 << AUTOMATIC_SHIFT) - 1

# used when a post has no interactionPolicy at all
DEFAULT_QUOTE_POLICY = 0


def classify(uri, followers_collection=None):
  """Returns the identity class flag for a policy subject URI, or 0.

  Args:
    uri (str): collection or actor URI from ``automaticApproval`` or
      ``manualApproval``
    followers_collection (str): the post author's followers collection URI

  Returns:
    int: one of the :data:`POLICY_FLAGS` values, or 0 if ``uri`` matches no
    known class
  """
  if uri in as2.PUBLICS:
    return POLICY_FLAGS['public']
  elif followers_collection and uri == followers_collection:
    return POLICY_FLAGS['followers']

  logger.debug(f'Ignoring quote policy subject {uri}; not a known identity class')
  return 0


def subpolicy_flags(uris, followers_collection=None):
  """Returns the union of identity class flags for a set of subject URIs."""
  flags = 0
  for uri in set(uris):
    flags |= classify(uri, followers_collection=followers_collection)
  return flags & HALF_MASK


def quote_policy(policy, followers_collection=None, default=DEFAULT_QUOTE_POLICY):
  """Evaluates an interaction policy's ``canQuote`` rules.

  Args:
    policy (jsonld.Node): the ``interactionPolicy`` node, or None if the post
      has none. A policy without ``canQuote`` approves nobody.
    followers_collection (str): the post author's followers collection URI
    default (int): returned if ``policy`` is None

  Returns:
    int: ``(automatic << 16) | manual``
  """
  if policy is None:
    return default

  can_quote = policy.node('canQuote')
  if can_quote is None:
    return 0

  automatic = subpolicy_flags(can_quote.ids('automaticApproval'),
                              followers_collection=followers_collection)
  manual = subpolicy_flags(can_quote.ids('manualApproval'),
                           followers_collection=followers_collection)
  return (automatic << AUTOMATIC_SHIFT) | manual
