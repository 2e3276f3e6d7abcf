import re
import unittest

from pdfpost.errors import RenderError
from pdfpost.fonts import FontBook, LayoutFonts
from pdfpost.layout.config import LayoutConfig, LayoutFeatures
from pdfpost.layout.models import DrawCommand, FontSelector
from pdfpost.layout.pipeline import layout_text
from pdfpost.report.pdf_render import PageHandle, PdfRenderer, render_document


HELVETICA = LayoutFonts(main='Helvetica', bold='Helvetica-Bold', emoji='Helvetica')


def _command(page=0, **overrides):
    values = dict(page=page, x=50, y=350, text='Hello', font=FontSelector.main, font_name='Helvetica', size=12)
    values.update(overrides)
    return DrawCommand(**values)


class TestPdfRenderer(unittest.TestCase):
    def test_pages_are_sequential(self):
        renderer = PdfRenderer(title='t.pdf', author='pdfpost')
        first = renderer.new_page(600, 400)
        renderer.draw_text(first, _command())
        second = renderer.new_page(600, 400)
        renderer.draw_text(second, _command(page=1, skew=12, underline=True, width=30))
        self.assertEqual(renderer.page_count, 2)

        with self.assertRaises(RenderError):
            renderer.draw_text(first, _command())

        content = renderer.serialize()
        self.assertTrue(content.startswith(b'%PDF'))

    def test_serialize_without_pages_fails(self):
        with self.assertRaises(RenderError):
            PdfRenderer().serialize()

    def test_draw_before_any_page_fails(self):
        renderer = PdfRenderer()
        with self.assertRaises(RenderError):
            renderer.draw_text(PageHandle(index=0, width=600, height=400), _command())

    def test_unknown_font_falls_back_to_helvetica(self):
        renderer = PdfRenderer()
        handle = renderer.new_page(200, 200)
        renderer.draw_text(handle, _command(font_name='NoSuchFont-Regular'))
        self.assertTrue(renderer.serialize().startswith(b'%PDF'))

    def test_render_document_page_count(self):
        text = '\n'.join(f'row {index}' for index in range(40))
        document = layout_text(
            text,
            config=LayoutConfig(page_height=400, margin=50, line_height=20),
            features=LayoutFeatures(custom_font=False),
            fonts=HELVETICA,
            font_book=FontBook(),
        )
        self.assertEqual(document.page_count, 3)

        content = render_document(document, title='rows.pdf')
        self.assertTrue(content.startswith(b'%PDF'))
        self.assertEqual(len(re.findall(rb'/Type\s*/Page(?![s\w])', content)), 3)


if __name__ == '__main__':
    unittest.main()
