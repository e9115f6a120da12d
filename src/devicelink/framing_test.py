import unittest

from hamcrest import assert_that, is_, calling, raises, empty

from devicelink.framing import LineFramer, LineTooLongError


class LineFramerTest(unittest.TestCase):

    def test_requires_terminator(self):
        assert_that(calling(LineFramer).with_args(b''), raises(ValueError))

    def test_two_lines_in_one_chunk(self):
        sut = LineFramer()
        assert_that(sut.feed(b"PING\r\nPONG\r\n"), is_(["PING", "PONG"]))
        assert_that(sut.pending, is_(b''))

    def test_partial_line_is_buffered(self):
        sut = LineFramer()
        assert_that(sut.feed(b"hel"), is_(empty()))
        assert_that(sut.pending, is_(b'hel'))
        assert_that(sut.feed(b"lo\nwor"), is_(["hello"]))
        assert_that(sut.pending, is_(b'wor'))

    def test_lines_are_stripped(self):
        sut = LineFramer()
        assert_that(sut.feed(b"  spaced out \t\r\n"), is_(["spaced out"]))

    def test_empty_lines_are_delivered(self):
        sut = LineFramer()
        assert_that(sut.feed(b"a\n\n\r\nb\n"), is_(["a", "", "", "b"]))

    def test_terminator_split_across_chunks(self):
        sut = LineFramer(terminator=b'\r\n')
        assert_that(sut.feed(b"abc\r"), is_(empty()))
        assert_that(sut.feed(b"\ndef"), is_(["abc"]))

    def test_invalid_bytes_are_replaced(self):
        sut = LineFramer()
        assert_that(sut.feed(b"ab\xffcd\n"), is_(["ab�cd"]))

    def test_utf8_multibyte_split_across_chunks(self):
        sut = LineFramer()
        data = "température\n".encode('utf-8')
        split = data.index(b'\xc3') + 1
        assert_that(sut.feed(data[:split]), is_(empty()))
        assert_that(sut.feed(data[split:]), is_(["température"]))

    def test_encode_appends_terminator(self):
        assert_that(LineFramer().encode("LED ON"), is_(b"LED ON\n"))
        assert_that(LineFramer(terminator=b'\r\n').encode("x"), is_(b"x\r\n"))

    def test_reset_discards_pending(self):
        sut = LineFramer()
        sut.feed(b"partial")
        sut.reset()
        assert_that(sut.pending, is_(b''))
        assert_that(sut.feed(b"next\n"), is_(["next"]))

    def test_max_length_must_be_positive(self):
        assert_that(calling(LineFramer).with_args(max_length=0), raises(ValueError))

    def test_line_of_max_length_is_accepted(self):
        sut = LineFramer(max_length=4)
        assert_that(sut.feed(b"abcd"), is_(empty()))
        assert_that(sut.feed(b"\n"), is_(["abcd"]))

    def test_overlong_line_is_discarded_up_to_its_terminator(self):
        sut = LineFramer(max_length=4)
        assert_that(calling(sut.feed).with_args(b"ok\nabcde"), raises(LineTooLongError, "exceeds 4 bytes"))
        assert_that(sut.pending, is_(b''))
        assert_that(sut.feed(b"fgh"), is_(empty()))
        assert_that(sut.feed(b"ij\nnext\n"), is_(["next"]))

    def test_overlong_error_carries_preceding_lines(self):
        sut = LineFramer(max_length=4)
        try:
            sut.feed(b"one\ntwo\n0123456789")
            self.fail("expected LineTooLongError")
        except LineTooLongError as e:
            assert_that(e.lines, is_(["one", "two"]))

    def test_buffer_is_bounded_without_terminators(self):
        sut = LineFramer(max_length=16)
        for _ in range(100):
            try:
                sut.feed(b"x" * 10)
            except LineTooLongError:
                pass
            assert_that(len(sut.pending) <= 16, is_(True))

    def test_reset_stops_discarding(self):
        sut = LineFramer(max_length=4)
        assert_that(calling(sut.feed).with_args(b"abcdef"), raises(LineTooLongError))
        sut.reset()
        assert_that(sut.feed(b"new\n"), is_(["new"]))
