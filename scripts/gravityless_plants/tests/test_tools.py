"""
Tests for the external asset tools, archive helpers and mod sources.
"""

import shutil
import tempfile
import unittest
import zipfile
from pathlib import Path
from unittest.mock import MagicMock, patch

from ..errors import ExternalToolError, ModNotFoundError
from ..providers.base import ModLocator, ModSource
from ..providers.sources import (
    DirectorySource, InstalledModSource, PackedArchiveSource, ZipArchiveSource, create_mod_locator,
)
from ..utils.tools import AssetTools, extract_zip, zip_directory
from .helpers import create_mod


def completed(returncode=0, stdout="", stderr=""):
    result = MagicMock()
    result.returncode = returncode
    result.stdout = stdout
    result.stderr = stderr
    return result


class TestAssetTools(unittest.TestCase):
    """Test running asset_packer and asset_unpacker."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.bin_dir = self.temp_dir / "bin"
        self.bin_dir.mkdir()
        self.tools = AssetTools(self.bin_dir)
        self.tools.is_windows = False
        for name in ("asset_packer", "asset_unpacker"):
            (self.bin_dir / name).write_text("#!/bin/sh\n")

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_tool_path(self):
        self.assertEqual(self.tools.tool_path("asset_packer"), self.bin_dir / "asset_packer")
        self.tools.is_windows = True
        self.assertEqual(self.tools.tool_path("asset_packer"), self.bin_dir / "asset_packer.exe")

    @patch("subprocess.run")
    def test_unpack(self, mock_run):
        dest = self.temp_dir / "unpacked"

        def run(command, **kwargs):
            Path(command[2]).mkdir()
            return completed()

        mock_run.side_effect = run
        result = self.tools.unpack(self.temp_dir / "packed.pak", dest)

        self.assertEqual(result, dest)
        command = mock_run.call_args[0][0]
        self.assertEqual(command, [str(self.bin_dir / "asset_unpacker"), str(self.temp_dir / "packed.pak"), str(dest)])

    @patch("subprocess.run")
    def test_pack(self, mock_run):
        archive = self.temp_dir / "release" / "mod.modpak"

        def run(command, **kwargs):
            Path(command[2]).write_bytes(b"pak")
            return completed()

        mock_run.side_effect = run
        self.assertEqual(self.tools.pack(self.temp_dir / "mod", archive), archive)

    @patch("subprocess.run")
    def test_non_zero_exit(self, mock_run):
        mock_run.return_value = completed(returncode=3, stderr="bad archive")

        with self.assertRaises(ExternalToolError) as context:
            self.tools.unpack(self.temp_dir / "packed.pak", self.temp_dir / "unpacked")

        self.assertEqual(context.exception.step, "unpack")
        self.assertEqual(context.exception.returncode, 3)
        self.assertEqual(context.exception.exit_code, 6)
        self.assertIn("Transform step 'unpack' failed", str(context.exception))
        self.assertIn("bad archive", str(context.exception))

    @patch("subprocess.run")
    def test_missing_output(self, mock_run):
        """Test that a zero exit without the expected output still fails."""
        mock_run.return_value = completed()

        with self.assertRaises(ExternalToolError) as context:
            self.tools.pack(self.temp_dir / "mod", self.temp_dir / "mod.modpak")

        self.assertEqual(context.exception.step, "pack")

    @patch("subprocess.run")
    def test_missing_tool(self, mock_run):
        (self.bin_dir / "asset_unpacker").unlink()

        with self.assertRaises(ExternalToolError):
            self.tools.unpack(self.temp_dir / "packed.pak", self.temp_dir / "unpacked")
        mock_run.assert_not_called()


class TestArchives(unittest.TestCase):
    """Test zip packaging and extraction."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_zip_directory_root_is_folder(self):
        mod_dir = create_mod(self.temp_dir)

        archive = zip_directory(mod_dir, self.temp_dir / "dist" / "soy.zip")

        with zipfile.ZipFile(archive) as zip_ref:
            names = zip_ref.namelist()
        self.assertIn("soy/soy.modinfo", names)
        self.assertIn("soy/objects/farmables/plant.png", names)
        self.assertTrue(all(name.startswith("soy/") for name in names))

    def test_extract_descends_into_single_folder(self):
        archive = zip_directory(create_mod(self.temp_dir / "src"), self.temp_dir / "soy.zip")

        root = extract_zip(archive, self.temp_dir / "extracted")

        self.assertEqual(root, self.temp_dir / "extracted" / "soy")
        self.assertTrue((root / "soy.modinfo").exists())

    def test_extract_flat_archive(self):
        archive = self.temp_dir / "flat.zip"
        with zipfile.ZipFile(archive, "w") as zip_ref:
            zip_ref.writestr("flat.modinfo", "{}")
            zip_ref.writestr("objects/a.object", "{}")

        self.assertEqual(extract_zip(archive, self.temp_dir / "extracted"), self.temp_dir / "extracted")

    def test_extract_bad_zip(self):
        archive = self.temp_dir / "bad.zip"
        archive.write_bytes(b"not a zip")

        with self.assertRaises(ExternalToolError):
            extract_zip(archive, self.temp_dir / "extracted")


class TestModLocator(unittest.TestCase):
    """Test resolving mod references to unpacked directories."""

    def setUp(self):
        """Set up test environment."""
        self.temp_dir = Path(tempfile.mkdtemp())
        self.mods_dir = self.temp_dir / "mods"
        self.tools = MagicMock(spec=AssetTools)
        self.locator = create_mod_locator(self.tools, self.temp_dir / "temp", self.mods_dir)

    def tearDown(self):
        """Clean up test environment."""
        shutil.rmtree(self.temp_dir)

    def test_sources_registered_in_order(self):
        self.assertEqual(self.locator.list_sources(), [
            "DirectorySource", "PackedArchiveSource", "ZipArchiveSource", "InstalledModSource",
        ])

    def test_register_rejects_non_source(self):
        with self.assertRaises(ValueError):
            ModLocator().register_source(object())

    def test_directory(self):
        mod_dir = create_mod(self.temp_dir)
        self.assertEqual(self.locator.resolve(str(mod_dir)), mod_dir.absolute())

    def test_packed_archive(self):
        archive = self.temp_dir / "soy.modpak"
        archive.write_bytes(b"pak")
        self.tools.unpack.side_effect = lambda source, dest: Path(dest)

        result = self.locator.resolve(str(archive))

        self.assertEqual(result, self.temp_dir / "temp" / "soy.modpak" / "soy")
        self.tools.unpack.assert_called_once_with(archive, self.temp_dir / "temp" / "soy.modpak" / "soy")

    def test_zip_archive(self):
        archive = zip_directory(create_mod(self.temp_dir / "src"), self.temp_dir / "soy.zip")

        result = self.locator.resolve(str(archive))

        self.assertEqual(result, self.temp_dir / "temp" / "soy.zip" / "soy" / "soy")
        self.assertTrue((result / "soy.modinfo").exists())

    def test_zips_sharing_a_stem_kept_apart(self):
        first_archive = zip_directory(create_mod(self.temp_dir / "a"), self.temp_dir / "a" / "soy.zip")
        second_archive = zip_directory(create_mod(self.temp_dir / "b"), self.temp_dir / "b" / "soy.zip")

        first = self.locator.resolve(str(first_archive))
        second = self.locator.resolve(str(second_archive))

        self.assertNotEqual(first, second)
        self.assertEqual(second, self.temp_dir / "temp" / "soy.zip-2" / "soy" / "soy")
        self.assertTrue((first / "soy.modinfo").exists())
        self.assertTrue((second / "soy.modinfo").exists())

    def test_zip_and_modpak_sharing_a_stem_kept_apart(self):
        """Test that unpacking soy.modpak leaves an already extracted soy.zip in place."""
        zipped = self.locator.resolve(str(
            zip_directory(create_mod(self.temp_dir / "a"), self.temp_dir / "a" / "soy.zip")))
        packed_archive = self.temp_dir / "b" / "soy.modpak"
        packed_archive.parent.mkdir()
        packed_archive.write_bytes(b"pak")

        def unpack(source, dest):
            Path(dest).mkdir()
            return Path(dest)

        self.tools.unpack.side_effect = unpack
        packed = self.locator.resolve(str(packed_archive))

        self.assertEqual(packed.name, "soy")
        self.assertNotEqual(packed, zipped)
        self.assertTrue((zipped / "soy.modinfo").exists())

    def test_installed_mod_by_name(self):
        create_mod(self.mods_dir, name="cotton")
        self.assertEqual(self.locator.resolve("cotton"), (self.mods_dir / "cotton").absolute())

    def test_installed_packed_mod_by_name(self):
        self.mods_dir.mkdir()
        (self.mods_dir / "cotton.modpak").write_bytes(b"pak")
        self.tools.unpack.side_effect = lambda source, dest: Path(dest)

        self.assertEqual(self.locator.resolve("cotton"), self.temp_dir / "temp" / "cotton.modpak" / "cotton")

    def test_unknown_reference(self):
        with self.assertRaises(ModNotFoundError) as context:
            self.locator.resolve("no_such_mod")
        self.assertEqual(context.exception.reference, "no_such_mod")

    def test_path_reference_not_looked_up_by_name(self):
        """Test that a missing path is not mistaken for an installed mod name."""
        with self.assertRaises(ModNotFoundError):
            self.locator.resolve(str(self.temp_dir / "missing"))

    def test_custom_source(self):
        class AliasSource(ModSource):
            def __init__(self, target):
                self.target = target

            def can_resolve(self, reference):
                return reference == "alias"

            def resolve(self, reference):
                return self.target

        mod_dir = create_mod(self.temp_dir)
        locator = ModLocator([AliasSource(mod_dir)])

        self.assertEqual(locator.resolve("alias"), mod_dir.absolute())
        self.assertIsInstance(DirectorySource(), ModSource)
        self.assertIsInstance(PackedArchiveSource(self.tools, self.temp_dir), ModSource)
        self.assertIsInstance(ZipArchiveSource(self.temp_dir), ModSource)
        self.assertIsInstance(InstalledModSource(self.mods_dir, locator), ModSource)


if __name__ == "__main__":
    unittest.main()
