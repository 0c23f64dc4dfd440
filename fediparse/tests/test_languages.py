"""Unit tests for languages.py."""
from oauth_dropins.webutil import testutil

from ..languages import normalize_language, select_language


class LanguagesTest(testutil.TestCase):

  def test_normalize_language(self):
    self.assertEqual('en', normalize_language('EN'))
    self.assertEqual('pt-br', normalize_language('pt_BR'))
    self.assertEqual('zh-hant-tw', normalize_language(' zh-Hant-TW '))
    self.assertEqual('und', normalize_language('und'))

  def test_normalize_language_invalid(self):
    for bad in None, '', 'e', 'english language', '12', 'en--us', 5, ['en']:
      self.assertIsNone(normalize_language(bad), bad)

  def test_select_language_empty(self):
    self.assertIsNone(select_language({}))
    self.assertIsNone(select_language(None))
    self.assertIsNone(select_language({}, default='en'))

  def test_select_language_one(self):
    self.assertEqual('fr', select_language({'fr': 'bonjour'}))
    self.assertEqual('fr', select_language({'fr': 'bonjour'}, default='en'))

  def test_select_language_several_no_default(self):
    content = {'fr': 'bonjour', 'de': 'hallo', 'en': 'hello'}
    self.assertEqual('de', select_language(content))

  def test_select_language_several_is_deterministic(self):
    self.assertEqual(select_language({'fr': 'a', 'de': 'b'}),
                     select_language({'de': 'b', 'fr': 'a'}))

  def test_select_language_prefers_default(self):
    content = {'fr': 'bonjour', 'de': 'hallo', 'en': 'hello'}
    self.assertEqual('en', select_language(content, default='en'))
    self.assertEqual('en', select_language(content, default='EN'))

  def test_select_language_prefers_default_primary_subtag(self):
    content = {'fr': 'bonjour', 'pt-pt': 'olá', 'pt-br': 'oi'}
    self.assertEqual('pt-br', select_language(content, default='pt'))
    self.assertEqual('pt-pt', select_language(content, default='pt_PT'))

  def test_select_language_default_missing(self):
    content = {'fr': 'bonjour', 'de': 'hallo'}
    self.assertEqual('de', select_language(content, default='ja'))
    self.assertEqual('de', select_language(content, default='not a tag'))
