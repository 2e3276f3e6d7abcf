import unittest

from pdfpost.fonts import LayoutFonts
from pdfpost.layout.emitter import emit
from pdfpost.layout.models import FontSelector, Line, LineRun, Page, StyleRecord


FONTS = LayoutFonts(main='Main', bold='Main-Bold', emoji='Emoji')


class TestCommandEmitter(unittest.TestCase):
    def test_x_accumulates_and_whitespace_is_skipped(self):
        plain = StyleRecord(size=12)
        bold = StyleRecord(bold=True, size=14)
        line = Line(
            runs=(
                LineRun(text='Hello', style=plain, width=30),
                LineRun(text=' ', style=bold, width=4),
                LineRun(text='World', style=bold, width=40),
            ),
            width=74,
            line_index=0,
        )
        page = Page(lines=(line,), offsets=(350.0,), height=400, page_index=0)
        commands = emit([page], margin=50, fonts=FONTS)

        self.assertEqual([command.text for command in commands], ['Hello', 'World'])
        self.assertEqual([command.x for command in commands], [50, 84])
        self.assertEqual([command.y for command in commands], [350, 350])
        self.assertEqual([command.font_name for command in commands], ['Main', 'Main-Bold'])
        self.assertEqual([command.size for command in commands], [12, 14])

    def test_style_flags_become_command_fields(self):
        italic = StyleRecord(italic=True, underline=True, size=12)
        emoji = StyleRecord(font=FontSelector.emoji, size=12)
        line = Line(
            runs=(LineRun(text='slanted', style=italic, width=20), LineRun(text='😀', style=emoji, width=12)),
            width=32,
            line_index=0,
        )
        page = Page(lines=(line,), offsets=(100.0,), height=200, page_index=3)
        commands = emit([page], margin=10, fonts=FONTS, color=(1.0, 0.0, 0.0), italic_skew=15)

        self.assertEqual(commands[0].skew, 15)
        self.assertTrue(commands[0].underline)
        self.assertEqual(commands[0].color, (1.0, 0.0, 0.0))
        self.assertEqual(commands[1].font, FontSelector.emoji)
        self.assertEqual(commands[1].font_name, 'Emoji')
        self.assertEqual(commands[1].skew, 0.0)
        self.assertEqual({command.page for command in commands}, {3})

    def test_order_is_page_then_line_then_run(self):
        style = StyleRecord(size=10)
        first = Line(runs=(LineRun(text='a', style=style, width=5),), width=5, line_index=0)
        second = Line(runs=(LineRun(text='b', style=style, width=5),), width=5, line_index=1)
        blank = Line(runs=(), width=0, line_index=2)
        pages = [
            Page(lines=(first, blank), offsets=(90.0, 70.0), height=100, page_index=0),
            Page(lines=(second,), offsets=(90.0,), height=100, page_index=1),
        ]
        commands = emit(pages, margin=10, fonts=FONTS)
        self.assertEqual([(c.page, c.text) for c in commands], [(0, 'a'), (1, 'b')])


if __name__ == '__main__':
    unittest.main()
