"""Unit tests for interaction_policy.py."""
import itertools

from oauth_dropins.webutil import testutil

from ..as2 import PUBLIC_AUDIENCE
from ..interaction_policy import (
  classify,
  POLICY_FLAGS,
  quote_policy,
  subpolicy_flags,
)
from ..jsonld import GTS, Node

ACTOR = 'https://example.com/actor'
FOLLOWERS = 'https://example.com/followers'
PUBLIC = POLICY_FLAGS['public']
FOLLOWERS_FLAG = POLICY_FLAGS['followers']


def policy(automatic=None, manual=None):
  can_quote = {}
  if automatic is not None:
    can_quote['automaticApproval'] = automatic
  if manual is not None:
    can_quote['manualApproval'] = manual
  return Node({'canQuote': can_quote})


class InteractionPolicyTest(testutil.TestCase):

  def test_flags_are_distinct_bits(self):
    flags = list(POLICY_FLAGS.values())
    self.assertEqual(len(flags), len(set(flags)))
    for flag in flags:
      self.assertEqual(1, bin(flag).count('1'))
      self.assertLess(flag, 1 << 16)

  def test_classify(self):
    self.assertEqual(PUBLIC, classify(PUBLIC_AUDIENCE, FOLLOWERS))
    self.assertEqual(PUBLIC, classify('as:Public', FOLLOWERS))
    self.assertEqual(PUBLIC, classify('Public'))
    self.assertEqual(FOLLOWERS_FLAG, classify(FOLLOWERS, FOLLOWERS))
    self.assertEqual(0, classify(ACTOR, FOLLOWERS))
    self.assertEqual(0, classify('https://other.example/users/eve', FOLLOWERS))
    self.assertEqual(0, classify(FOLLOWERS, None))

  def test_subpolicy_flags(self):
    self.assertEqual(0, subpolicy_flags([]))
    self.assertEqual(PUBLIC | FOLLOWERS_FLAG, subpolicy_flags(
      [FOLLOWERS, PUBLIC_AUDIENCE, ACTOR, FOLLOWERS], FOLLOWERS))

  def test_no_policy_returns_default(self):
    self.assertEqual(0, quote_policy(None))
    self.assertEqual(123, quote_policy(None, default=123))

  def test_empty_policy_ignores_default(self):
    for node in (Node({}), Node({'canQuote': {}}), Node({'canQuote': 'nope'}),
                 policy(automatic=[]), policy(automatic=[], manual=[])):
      self.assertEqual(0, quote_policy(node, FOLLOWERS, default=123), node.data)

  def test_nobody(self):
    self.assertEqual(0, quote_policy(policy(automatic=ACTOR), FOLLOWERS))

  def test_everybody(self):
    self.assertEqual(PUBLIC << 16,
                     quote_policy(policy(automatic=PUBLIC_AUDIENCE), FOLLOWERS))

  def test_followers_automatic_public_manual(self):
    self.assertEqual(PUBLIC | (FOLLOWERS_FLAG << 16), quote_policy(
      policy(automatic=FOLLOWERS, manual=PUBLIC_AUDIENCE), FOLLOWERS))

  def test_manual_only(self):
    self.assertEqual(PUBLIC | FOLLOWERS_FLAG, quote_policy(
      policy(manual=[PUBLIC_AUDIENCE, FOLLOWERS]), FOLLOWERS))

  def test_followers_without_followers_collection(self):
    self.assertEqual(0, quote_policy(policy(automatic=FOLLOWERS)))

  def test_order_independent(self):
    uris = [PUBLIC_AUDIENCE, FOLLOWERS, ACTOR, 'https://other.example/x']
    expected = (PUBLIC | FOLLOWERS_FLAG) << 16
    for perm in itertools.permutations(uris):
      self.assertEqual(expected, quote_policy(policy(automatic=list(perm)),
                                              FOLLOWERS))

  def test_garbage_subjects(self):
    self.assertEqual(PUBLIC << 16, quote_policy(policy(
      automatic=[5, None, {'foo': 'bar'}, [], PUBLIC_AUDIENCE]), FOLLOWERS))

  def test_expanded(self):
    node = Node({
      GTS + 'canQuote': [{
        GTS + 'automaticApproval': [{'@id': FOLLOWERS}],
        GTS + 'manualApproval': [{'@id': PUBLIC_AUDIENCE}],
      }],
    })
    self.assertEqual(PUBLIC | (FOLLOWERS_FLAG << 16),
                     quote_policy(node, FOLLOWERS))
