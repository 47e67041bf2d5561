# Copyright (c) Twisted Matrix Laboratories.
# See LICENSE for details.

"""
Tests for L{txftp.reply}.
"""

from twisted.trial.unittest import SynchronousTestCase

from txftp.reply import ReplyDecoder, Response, parsePWDResponse


class ReplyDecoderTests(SynchronousTestCase):
    def setUp(self):
        self.decoder = ReplyDecoder()

    def feed(self, *lines):
        return [self.decoder.decode(line) for line in lines]

    def test_singleLine(self):
        """
        A line of three digits and a space is a complete reply.
        """
        self.assertEqual(
            self.feed("200 Command okay."),
            [Response(200, "200 Command okay.")],
        )

    def test_codeOnly(self):
        """
        Some servers send nothing but the code.
        """
        self.assertEqual(self.feed("230"), [Response(230, "230")])

    def test_multiLine(self):
        """
        A reply opened by C{NNN-} ends at the first line starting with
        C{NNN }, and its text holds every line.
        """
        results = self.feed("211-Features:", " MDTM", " SIZE", "211 End")
        self.assertEqual(results[:3], [None, None, None])
        self.assertEqual(results[3],
                         Response(211, "211-Features:\n MDTM\n SIZE\n211 End"))

    def test_multiLineOtherCodes(self):
        """
        Lines inside a multi-line reply starting with another code, or with
        the same code and a hyphen, do not end it.
        """
        results = self.feed("213-Status of /:", "200 not the end",
                            "213-still not", "213 End of status")
        self.assertIsNone(results[2])
        self.assertEqual(results[3].code, 213)
        self.assertEqual(results[3].text.count("\n"), 3)

    def test_noise(self):
        """
        Empty lines and lines not starting with a code are dropped.
        """
        self.assertEqual(self.feed("", "   ", "hello there"),
                         [None, None, None])


class ResponseTests(SynchronousTestCase):
    def test_marks(self):
        """
        Codes strictly between 100 and 200 are marks.
        """
        self.assertTrue(Response(150, "").isMark())
        self.assertTrue(Response(125, "").isMark())
        self.assertFalse(Response(100, "").isMark())
        self.assertFalse(Response(226, "").isMark())

    def test_errors(self):
        self.assertTrue(Response(400, "").isError())
        self.assertTrue(Response(550, "").isError())
        self.assertFalse(Response(399, "").isError())


class ParsePWDResponseTests(SynchronousTestCase):
    def test_quoted(self):
        self.assertEqual(
            parsePWDResponse('257 "/home/andrew" is current directory.'),
            "/home/andrew",
        )

    def test_unquoted(self):
        self.assertIsNone(parsePWDResponse("257 /home/andrew"))
