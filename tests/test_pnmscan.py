''' Unit tests for pnmscan.
'''

import unittest

import pnmscan
from pnmscan import NetpbmScanner, skip_comments

class TestSkipComments(unittest.TestCase):

  def test_stacked_comments(self):
    ''' Consecutive comment lines are all skipped. '''
    self.assertEqual(skip_comments(b"# a\n# b\nX", 0), 8)

  def test_not_at_line_start(self):
    self.assertEqual(skip_comments(b"a#b\n", 1), 1)

  def test_after_newline(self):
    self.assertEqual(skip_comments(b"1\n#x\n2", 2), 5)

  def test_comment_to_end(self):
    self.assertEqual(skip_comments(b"#abc", 0), 4)

  def test_past_end(self):
    self.assertEqual(skip_comments(b"ab", 2), 2)

class TestScanner(unittest.TestCase):

  def test_next_character(self):
    scanner = NetpbmScanner(b"a\n#x\nb")
    self.assertEqual(scanner.next_character(), ord("a"))
    self.assertEqual(scanner.next_character(), ord("\n"))
    self.assertEqual(scanner.next_character(), ord("b"))
    self.assertIsNone(scanner.next_character())
    self.assertIsNone(scanner.next_character())

  def test_only_comment(self):
    scanner = NetpbmScanner(b"# nothing here")
    self.assertIsNone(scanner.next_character())
    self.assertIsNone(scanner.next_word())

  def test_next_word(self):
    scanner = NetpbmScanner(b"  P6\nrest")
    self.assertEqual(scanner.next_word(), b"P6")
    # The delimiter is left unread.
    self.assertEqual(scanner.position, 4)
    self.assertEqual(scanner.next_word(), b"rest")
    self.assertIsNone(scanner.next_word())

  def test_next_word_empty(self):
    self.assertIsNone(NetpbmScanner(b"").next_word())
    self.assertIsNone(NetpbmScanner(b" \t\r\n\x0b\x0c").next_word())

  def test_next_unsigned_integer(self):
    scanner = NetpbmScanner(b"007 -12\nx")
    self.assertEqual(scanner.next_unsigned_integer(), 7)
    # The sign is skipped like whitespace.
    self.assertEqual(scanner.next_unsigned_integer(), 12)
    self.assertIsNone(scanner.next_unsigned_integer())

  def test_large_integer(self):
    scanner = NetpbmScanner(b"18446744073709551616")
    self.assertEqual(scanner.next_unsigned_integer(), 2 ** 64)

  def test_header_comments(self):
    scanner = NetpbmScanner(
      b"P2\n# comment\n4 4\n# another comment\n255\nDATA")
    self.assertEqual(scanner.next_word(), b"P2")
    self.assertEqual(scanner.next_unsigned_integer(), 4)
    self.assertEqual(scanner.next_unsigned_integer(), 4)
    self.assertEqual(scanner.next_unsigned_integer(), 255)
    self.assertEqual(scanner.remaining_data(), b"DATA")

  def test_remaining_data_keeps_later_comments(self):
    scanner = NetpbmScanner(b"1\n# c\n  0 1\n# d\n1")
    self.assertEqual(scanner.next_unsigned_integer(), 1)
    self.assertEqual(scanner.remaining_data(), b"0 1\n# d\n1")

  def test_remaining_data_raw(self):
    scanner = NetpbmScanner(b"P5\n2 1\n255\n\x80\x02")
    scanner.next_word()
    scanner.next_unsigned_integer()
    scanner.next_unsigned_integer()
    scanner.next_unsigned_integer()
    self.assertEqual(scanner.remaining_data(), b"\x80\x02")

  def test_remaining_data_exhausted(self):
    scanner = NetpbmScanner(b"1   ")
    scanner.next_unsigned_integer()
    self.assertEqual(scanner.remaining_data(), b"")
    self.assertEqual(scanner.position, 4)

  def test_memoryview_input(self):
    scanner = NetpbmScanner(memoryview(b"P1 1 1 0"))
    self.assertEqual(scanner.next_word(), b"P1")
    self.assertEqual(scanner.length, 8)

  def test_classes(self):
    for ch in b" \t\n\r\x0b\x0c":
      self.assertTrue(pnmscan.is_whitespace(ch))
    self.assertFalse(pnmscan.is_whitespace(0))
    self.assertTrue(pnmscan.is_digit(ord("9")))
    self.assertFalse(pnmscan.is_digit(ord("a")))

if __name__ == '__main__':
  unittest.main()
