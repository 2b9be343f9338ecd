import unittest

from sqlalchemy import text

from edublog.configs.database import make_engine
from tests.support import make_settings


class TestMakeEngine(unittest.TestCase):

    def setUp(self):
        self.engine = make_engine(make_settings())

    def tearDown(self):
        self.engine.dispose()

    def test_casefold_folds_accented_letters(self):
        with self.engine.connect() as connection:
            folded = connection.execute(text("SELECT casefold('MATEMÁTICA')")).scalar()
        self.assertEqual(folded, "matemática")

    def test_casefold_passes_null_through(self):
        with self.engine.connect() as connection:
            self.assertIsNone(connection.execute(text("SELECT casefold(NULL)")).scalar())

    def test_json_each_splits_tags(self):
        with self.engine.connect() as connection:
            rows = connection.execute(text("""SELECT value FROM json_each('["ab", "cd"]')""")).scalars().all()
        self.assertEqual(rows, ["ab", "cd"])


if __name__ == "__main__":
    unittest.main()
