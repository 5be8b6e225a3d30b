"""
Tests for manifest lookup and farmable object scanning.
"""

import shutil
import tempfile
import unittest
from pathlib import Path

from ..content import ContentStore
from ..errors import ManifestNotFoundError, MultipleManifestsError
from ..processing.scanner import DefinitionScanner
from .helpers import create_mod, write_json, write_png


class TestFindModfile(unittest.TestCase):
    """Test locating a mod's manifest."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.scanner = DefinitionScanner(ContentStore())

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_single_manifest(self):
        mod_dir = create_mod(self.temp_dir)
        manifest = self.scanner.find_modfile(mod_dir)

        self.assertTrue(manifest.exists)
        self.assertEqual(manifest.path, mod_dir / "soy.modinfo")
        self.assertEqual(manifest.root_path, mod_dir)
        self.assertEqual(manifest["name"], "soy")

    def test_multiple_manifests(self):
        mod_dir = create_mod(self.temp_dir)
        write_json(mod_dir / "other.modinfo", {"name": "other"})

        with self.assertRaises(MultipleManifestsError) as context:
            self.scanner.find_modfile(mod_dir)

        self.assertEqual(context.exception.exit_code, 3)
        self.assertEqual(len(context.exception.manifests), 2)

    def test_missing_manifest_with_fallback(self):
        """Test that a manifest-less mod gets a synthesized manifest named after its directory."""
        mod_dir = create_mod(self.temp_dir, name="assets", manifest=False)
        manifest = self.scanner.find_modfile(mod_dir, fallback=True)

        self.assertFalse(manifest.exists)
        self.assertEqual(manifest.path, mod_dir / "assets.modinfo")
        self.assertIsNone(manifest["name"])

    def test_missing_manifest_without_fallback(self):
        mod_dir = create_mod(self.temp_dir, manifest=False)

        with self.assertRaises(ManifestNotFoundError) as context:
            self.scanner.find_modfile(mod_dir, fallback=False)

        self.assertEqual(context.exception.exit_code, 4)

    def test_nested_manifest_ignored(self):
        """Test that only manifests at the mod root count."""
        mod_dir = create_mod(self.temp_dir)
        write_json(mod_dir / "objects" / "nested.modinfo", {"name": "nested"})

        self.assertEqual(self.scanner.find_modfile(mod_dir)["name"], "soy")


class TestFindPlants(unittest.TestCase):
    """Test scanning a mod for structured documents and plants."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.store = ContentStore()
        self.scanner = DefinitionScanner(self.store)

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_find_files_skips_non_documents(self):
        mod_dir = create_mod(self.temp_dir)
        (mod_dir / "objects" / "broken.object").write_text('{"objectType": ', encoding="utf-8")

        files = self.scanner.find_files(self.scanner.find_modfile(mod_dir))
        names = [file.relative_path.as_posix() for file in files]

        self.assertEqual(files, sorted(files, key=lambda file: file.path))
        self.assertIn("soy.modinfo", names)
        self.assertIn("objects/farmables/plant.frames", names)
        self.assertIn("items/seed.item", names)
        self.assertNotIn("objects/farmables/plant.png", names)
        self.assertNotIn("readme.txt", names)
        self.assertNotIn("objects/broken.object", names)

    def test_find_files_skips_cached_binaries(self):
        """Test that files already loaded as binary are not re-read as documents."""
        mod_dir = create_mod(self.temp_dir)
        image = self.store.get_binary(mod_dir / "objects" / "farmables" / "plant.png", mod_dir)

        self.scanner.find_files(self.scanner.find_modfile(mod_dir))

        self.assertIs(self.store.peek(image.path), image)

    def test_find_objects(self):
        mod_dir = create_mod(self.temp_dir, plants=2)
        objects = self.scanner.find_objects(self.scanner.find_modfile(mod_dir))

        self.assertEqual(
            sorted(obj.relative_path.as_posix() for obj in objects),
            ["objects/chair.object", "objects/farmables/plant0.object", "objects/farmables/plant1.object"],
        )

    def test_find_plants(self):
        mod_dir = create_mod(self.temp_dir, plants=2)
        plants = self.scanner.find_plants(self.scanner.find_modfile(mod_dir))

        self.assertEqual([plant.name for plant in plants], ["plant0", "plant1"])
        self.assertTrue(all(plant.object_type == "farmable" for plant in plants))

    def test_find_plants_in_manifest_path(self):
        """Test that the manifest's path field selects the content root."""
        mod_dir = self.temp_dir / "wrapped"
        write_json(mod_dir / "wrapped.modinfo", {"name": "wrapped", "path": "content"})
        create_mod(mod_dir, name="content", manifest=False)
        write_json(mod_dir / "outside.object", {"objectType": "farmable"})

        plants = self.scanner.find_plants(self.scanner.find_modfile(mod_dir))

        self.assertEqual([plant.relative_path.as_posix() for plant in plants],
                         ["content/objects/farmables/plant0.object"])

    def test_hidden_files_skipped(self):
        mod_dir = create_mod(self.temp_dir)
        write_json(mod_dir / "objects" / ".hidden.object", {"objectType": "farmable"})

        plants = self.scanner.find_plants(self.scanner.find_modfile(mod_dir))

        self.assertEqual([plant.name for plant in plants], ["plant0"])

    def test_hidden_directories_skipped(self):
        """Test that nothing under a dot-named directory such as .git is read."""
        mod_dir = create_mod(self.temp_dir)
        hidden = write_json(mod_dir / ".git" / "objects" / "plant.object", {"objectType": "farmable"})

        files = self.scanner.find_files(self.scanner.find_modfile(mod_dir))

        self.assertNotIn(hidden, [file.path for file in files])
        self.assertNotIn(hidden, self.store)
        self.assertEqual([plant.name for plant in self.scanner.find_plants(self.scanner.find_modfile(mod_dir))],
                         ["plant0"])

    def test_plants_record_content_root(self):
        mod_dir = self.temp_dir / "wrapped"
        write_json(mod_dir / "wrapped.modinfo", {"name": "wrapped", "path": "content"})
        create_mod(mod_dir, name="content", manifest=False)

        plants = self.scanner.find_plants(self.scanner.find_modfile(mod_dir))

        self.assertEqual(plants[0].metadata["content_root"], (mod_dir / "content").absolute())

    def test_manifest_less_mod(self):
        mod_dir = create_mod(self.temp_dir, manifest=False)
        write_png(mod_dir / "other.png")

        plants = self.scanner.find_plants(self.scanner.find_modfile(mod_dir, fallback=True))

        self.assertEqual(len(plants), 1)


if __name__ == "__main__":
    unittest.main()
