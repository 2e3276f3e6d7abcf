import os
import tempfile
import time
import unittest
from datetime import datetime, timezone
from unittest import mock

from pdfpost.config import get_settings
from pdfpost.storage import cleanup_expired, load_temp_pdf, save_temp_pdf, temp_path


class TestTempStorage(unittest.TestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self._env = mock.patch.dict(
            os.environ, {'DATA_DIR': self._tmp.name, 'TEMP_PDF_TTL_SECONDS': '300'}
        )
        self._env.start()
        get_settings.cache_clear()

    def tearDown(self):
        self._env.stop()
        get_settings.cache_clear()
        self._tmp.cleanup()

    def test_save_and_load(self):
        before = datetime.now(timezone.utc)
        name, expires_at = save_temp_pdf(b'%PDF-1.4 body')
        self.assertRegex(name, r'^[0-9a-f]{32}\.pdf$')
        self.assertGreaterEqual((expires_at - before).total_seconds(), 299)
        self.assertEqual(load_temp_pdf(name), b'%PDF-1.4 body')

    def test_expired_file_is_removed(self):
        name, _ = save_temp_pdf(b'%PDF old')
        path = temp_path(name)
        stale = time.time() - 1000
        os.utime(path, (stale, stale))
        self.assertIsNone(load_temp_pdf(name))
        self.assertFalse(path.exists())

    def test_cleanup_expired(self):
        old_name, _ = save_temp_pdf(b'old')
        fresh_name, _ = save_temp_pdf(b'fresh')
        stale = time.time() - 1000
        os.utime(temp_path(old_name), (stale, stale))

        self.assertEqual(cleanup_expired(), 1)
        self.assertFalse(temp_path(old_name).exists())
        self.assertTrue(temp_path(fresh_name).exists())

    def test_invalid_or_unknown_names(self):
        self.assertIsNone(load_temp_pdf('../../etc/passwd'))
        self.assertIsNone(load_temp_pdf('report.pdf'))
        self.assertIsNone(load_temp_pdf('0' * 32 + '.pdf'))
        with self.assertRaises(ValueError):
            temp_path('../x.pdf')

    def test_file_removed_by_concurrent_cleanup(self):
        name, _ = save_temp_pdf(b'%PDF gone')
        with mock.patch('pdfpost.storage._is_expired', side_effect=FileNotFoundError):
            self.assertIsNone(load_temp_pdf(name))

        temp_path(name).unlink()
        self.assertIsNone(load_temp_pdf(name))


if __name__ == '__main__':
    unittest.main()
