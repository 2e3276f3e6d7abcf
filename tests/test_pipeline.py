import unittest

from reportlab.pdfbase import pdfmetrics

from pdfpost.errors import ConfigError
from pdfpost.fonts import FontBook, LayoutFonts
from pdfpost.layout.config import LayoutConfig, LayoutFeatures
from pdfpost.layout.models import FontSelector, TagKind, TokenKind
from pdfpost.layout.pipeline import layout_text, tokenize


HELVETICA = LayoutFonts(main='Helvetica', bold='Helvetica-Bold', emoji='Helvetica')


def _layout(text, **overrides):
    config = LayoutConfig(
        page_width=overrides.pop('page_width', 600),
        page_height=overrides.pop('page_height', 400),
        margin=overrides.pop('margin', 50),
        line_height=overrides.pop('line_height', 20),
        base_font_size=overrides.pop('base_font_size', 12),
        max_width=overrides.pop('max_width', 500),
    )
    features = overrides.pop('features', LayoutFeatures(custom_font=False))
    return layout_text(text, config=config, features=features, fonts=HELVETICA, font_book=FontBook())


class TestPipeline(unittest.TestCase):
    def test_end_to_end_scenario(self):
        document = _layout('Hello\n**World**')

        self.assertEqual(document.page_count, 1)
        self.assertEqual([line.text for line in document.lines], ['Hello', 'World'])
        commands = document.commands
        self.assertEqual(len(commands), 2)

        hello, world = commands
        self.assertEqual((hello.text, hello.y, hello.x, hello.size), ('Hello', 350, 50, 12))
        self.assertEqual((world.text, world.y, world.x, world.size), ('World', 330, 50, 14))
        self.assertEqual(hello.font_name, 'Helvetica')
        self.assertEqual(world.font_name, 'Helvetica-Bold')
        self.assertEqual({command.page for command in commands}, {0})

    def test_widths_come_from_font_metrics(self):
        document = _layout('Hello **World**')
        line = document.lines[0]
        expected = (
            pdfmetrics.stringWidth('Hello ', 'Helvetica', 12)
            + pdfmetrics.stringWidth('World', 'Helvetica-Bold', 14)
        )
        self.assertAlmostEqual(line.width, expected)
        self.assertAlmostEqual(document.commands[1].x, 50 + pdfmetrics.stringWidth('Hello ', 'Helvetica', 12))

    def test_pagination_completeness_for_long_text(self):
        text = '\n'.join(f'line {index} with **some** words to wrap around' for index in range(60))
        document = _layout(text, max_width=120)
        on_pages = [line for page in document.pages for line in page.lines]
        self.assertEqual(on_pages, list(document.lines))
        self.assertGreater(document.page_count, 1)
        for line in document.lines:
            if len(line.text.split()) > 1:
                self.assertLessEqual(line.width, 120)

    def test_config_error_raised_before_layout(self):
        with self.assertRaises(ConfigError):
            _layout('x', page_height=90, margin=50)
        with self.assertRaises(ConfigError):
            _layout('x', max_width=0)
        with self.assertRaises(ConfigError):
            _layout('x', line_height=0)

    def test_empty_text_gives_one_page(self):
        document = _layout('')
        self.assertEqual(document.page_count, 1)
        self.assertEqual(document.commands, ())

    def test_markup_can_be_switched_off(self):
        document = _layout('**x**', features=LayoutFeatures(markup=False, custom_font=False))
        self.assertEqual([command.text for command in document.commands], ['**x**'])
        self.assertEqual(document.commands[0].size, 12)

    def test_unsupported_characters_are_dropped(self):
        document = _layout('abc\x07中def')
        self.assertEqual(document.lines[0].text, 'abcdef')

    def test_tokenize_feature_flags(self):
        tokens = tokenize('<b>hi 😀</b>', features=LayoutFeatures())
        self.assertEqual([token.kind for token in tokens], [TokenKind.text, TokenKind.emoji])
        self.assertTrue(all(TagKind.bold in token.styles for token in tokens))

        tokens = tokenize('<b>hi 😀</b>', features=LayoutFeatures(markup=False, emoji=False))
        self.assertEqual([token.content for token in tokens], ['<b>hi 😀</b>'])
        self.assertEqual(tokens[0].kind, TokenKind.text)

    def test_emoji_get_emoji_font(self):
        fonts = LayoutFonts(main='Helvetica', bold='Helvetica-Bold', emoji='Courier')
        document = layout_text(
            'ok 👍',
            config=LayoutConfig(),
            features=LayoutFeatures(custom_font=False),
            fonts=fonts,
            font_book=FontBook(),
        )
        self.assertEqual([command.font_name for command in document.commands], ['Helvetica', 'Courier'])

    def test_character_references_cannot_bypass_sanitizer(self):
        text = 'a&#x4E2D;&#7;&#x1F600;b'
        document = _layout(text, features=LayoutFeatures(emoji=False, custom_font=False))
        self.assertEqual([line.text for line in document.lines], ['ab'])

        document = _layout(text, features=LayoutFeatures(custom_font=False))
        self.assertEqual(document.lines[0].text, 'a\U0001F600b')
        self.assertEqual(document.commands[1].font, FontSelector.emoji)

    def test_emoji_dropped_when_emoji_disabled(self):
        document = _layout('hi \U0001F600 there', features=LayoutFeatures(emoji=False, custom_font=False))
        self.assertEqual(document.lines[0].text, 'hi there')
        self.assertTrue(all(token.kind == TokenKind.text for token in document.tokens))

    def test_per_side_margins(self):
        config = LayoutConfig(margin_left=10, margin_top=20, margin_right=30, margin_bottom=40, line_height=20)
        document = layout_text(
            '\n'.join('row' for _ in range(20)),
            config=config,
            features=LayoutFeatures(custom_font=False),
            fonts=HELVETICA,
            font_book=FontBook(),
        )
        first = document.commands[0]
        self.assertEqual((first.x, first.y), (10, 380))
        # 380, 360, ..., 40 -> 18 lines on the first page
        self.assertEqual(len(document.pages[0].lines), 18)
        self.assertEqual(document.pages[0].offsets[-1], 40)

    def test_non_finite_config_is_rejected(self):
        with self.assertRaises(ConfigError):
            _layout('a\nb', line_height=float('nan'))


if __name__ == '__main__':
    unittest.main()
