import json
import sys
import tempfile
import unittest
from pathlib import Path

from typer.testing import CliRunner

# Ensure src/ is on sys.path so we can import the package without installation
PROJECT_ROOT = Path(__file__).resolve().parents[1]
SRC_DIR = PROJECT_ROOT / "src"
if str(SRC_DIR) not in sys.path:
    sys.path.insert(0, str(SRC_DIR))

from ollama_tag import __version__  # noqa: E402
from ollama_tag.cli import app  # noqa: E402
from ollama_tag.store import TagStore  # noqa: E402
from ollama_tag.tags_types import new_tag  # noqa: E402


class CliTests(unittest.TestCase):
    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.db_path = Path(self._tmp.name) / "tags" / "tags.json"
        self.runner = CliRunner()

    def invoke(self, *args, input=None):
        return self.runner.invoke(app, ["--db", str(self.db_path), *args], input=input)

    def seed(self, *tags):
        store = TagStore(self.db_path)
        for tag in tags:
            store.add(tag)

    def stored(self):
        return TagStore(self.db_path)

    def test_version(self):
        result = self.runner.invoke(app, ["--version"])
        self.assertEqual(result.exit_code, 0)
        self.assertIn(__version__, result.output)

    def test_add(self):
        result = self.invoke("add", "llama3", "-c", "llm", "-d", "Meta model", "-m", "size=8b")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Tag "llama3" added successfully', result.output)
        self.assertIn("Category: llm", result.output)
        tag = self.stored().get("llama3")
        self.assertEqual(tag["category"], "llm")
        self.assertEqual(tag["description"], "Meta model")
        self.assertEqual(tag["metadata"], {"size": "8b"})
        self.assertIn("createdAt", tag)

    def test_add_blank_name(self):
        result = self.invoke("add", "   ")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Tag name cannot be empty", result.output)

    def test_add_bad_metadata(self):
        result = self.invoke("add", "x", "--meta", "nokey")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("KEY=VALUE", result.output)
        self.assertFalse(self.stored().exists("x"))

    def test_add_duplicate(self):
        self.seed(new_tag("dup"))
        result = self.invoke("add", "dup")
        self.assertEqual(result.exit_code, 1)
        self.assertIn('Tag "dup" already exists', result.output)

    def test_list_empty(self):
        result = self.invoke("list")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("No tags found", result.output)
        self.assertIn("No tags found in the system", result.output)
        self.assertTrue(self.db_path.is_file())

    def test_list_empty_category(self):
        self.seed(new_tag("a", category="llm"))
        result = self.invoke("list", "--category", "tool")
        self.assertEqual(result.exit_code, 0)
        self.assertIn('No tags found in category "tool"', result.output)

    def test_list_table(self):
        self.seed(new_tag("alpha", category="llm", description="first"), new_tag("beta"))
        result = self.invoke("list")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("alpha", result.output)
        self.assertIn("beta", result.output)
        self.assertIn("Total: 2 tags", result.output)

    def test_list_json(self):
        self.seed(new_tag("alpha", category="llm"), new_tag("beta", category="tool"))
        result = self.invoke("list", "-c", "llm", "-f", "json")
        self.assertEqual(result.exit_code, 0, result.output)
        payload = json.loads(result.output)
        self.assertEqual([tag["name"] for tag in payload], ["alpha"])

    def test_list_json_empty(self):
        result = self.invoke("list", "--format", "json")
        self.assertEqual(json.loads(result.output), [])

    def test_list_corrupt_database(self):
        self.db_path.parent.mkdir(parents=True)
        self.db_path.write_text("not json", encoding="utf-8")
        result = self.invoke("list")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error listing tags:", result.output)

    def test_search(self):
        self.seed(
            new_tag("alpha-model", category="llm"),
            new_tag("beta", description="alpha variant", category="tool"),
        )
        result = self.invoke("search", "ALPHA", "-f", "json")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(sorted(tag["name"] for tag in json.loads(result.output)), ["alpha-model", "beta"])

        result = self.invoke("search", "alpha", "--category", "llm")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("alpha-model", result.output)
        self.assertIn("Found 1 matching tags", result.output)

    def test_search_no_results(self):
        result = self.invoke("search", "zzz", "-c", "llm")
        self.assertEqual(result.exit_code, 0)
        self.assertIn("No tags found matching your search", result.output)
        self.assertIn('Search query: "zzz"', result.output)
        self.assertIn('Category filter: "llm"', result.output)

    def test_search_malformed_entry(self):
        self.db_path.parent.mkdir(parents=True)
        self.db_path.write_text(json.dumps({"tags": {"x": {"category": "a"}}}), encoding="utf-8")
        result = self.invoke("search", "q")
        self.assertEqual(result.exit_code, 1)
        self.assertIsInstance(result.exception, SystemExit)
        self.assertIn("Error searching tags:", result.output)

    def test_search_blank_query(self):
        result = self.invoke("search", " ")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Search query cannot be empty", result.output)

    def test_delete_force(self):
        self.seed(new_tag("gone"))
        result = self.invoke("delete", "gone", "--force")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Tag "gone" deleted successfully', result.output)
        self.assertFalse(self.stored().exists("gone"))

    def test_delete_confirmed(self):
        self.seed(new_tag("gone"))
        result = self.invoke("delete", "gone", input="y\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertFalse(self.stored().exists("gone"))

    def test_delete_cancelled(self):
        self.seed(new_tag("kept"))
        result = self.invoke("delete", "kept", input="n\n")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Operation cancelled", result.output)
        self.assertTrue(self.stored().exists("kept"))

    def test_delete_missing(self):
        result = self.invoke("delete", "missing", "-f")
        self.assertEqual(result.exit_code, 1)
        self.assertIn('Tag "missing" does not exist', result.output)

    def test_update(self):
        self.seed(new_tag("t", category="old", created_at="2024-01-01T00:00:00.000Z"))
        result = self.invoke("update", "t", "-d", "now described")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn('Tag "t" updated successfully', result.output)
        tag = self.stored().get("t")
        self.assertEqual(tag["description"], "now described")
        self.assertEqual(tag["category"], "old")
        self.assertEqual(tag["createdAt"], "2024-01-01T00:00:00.000Z")
        self.assertIn("updatedAt", tag)

    def test_update_requires_a_field(self):
        self.seed(new_tag("t"))
        result = self.invoke("update", "t")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Nothing to update", result.output)

    def test_update_missing(self):
        result = self.invoke("update", "missing", "-c", "x")
        self.assertEqual(result.exit_code, 1)
        self.assertIn("Error updating tag:", result.output)

    def test_backup(self):
        self.seed(new_tag("a"))
        result = self.invoke("backup")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Backup written to", result.output)
        backups = list(self.db_path.parent.glob("tags.json.*.backup"))
        self.assertEqual(len(backups), 1)
        self.assertEqual(backups[0].read_bytes(), self.db_path.read_bytes())


if __name__ == "__main__":
    unittest.main()
