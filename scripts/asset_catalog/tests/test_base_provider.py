"""
Tests for the provider capability, run snapshots and concurrent probing.
"""

import os
import shutil
import tempfile
import threading
import unittest
from PIL import Image

from ..errors import ConfigurationError, DecodeFailure
from ..providers.base import AssetProvider, AssetSnapshot, ImageInfo, probe_images, probe_sizes
from ..providers.local import LocalAssetProvider
from ..utils.naming import normalize_path


class FakeProvider(AssetProvider):
    """In-memory provider; paths map to (width, height, size)."""

    def __init__(self, files):
        self.files = files
        self.listings = 0
        self.threads = set()

    def list_all_files(self, root):
        self.listings += 1
        return list(self.files)

    def stat_size(self, path):
        self.threads.add(threading.get_ident())
        return self.files[path][2]

    def read_image_dimensions(self, path):
        if self.files[path][0] is None:
            raise DecodeFailure(path, "corrupt header")
        return self.files[path][0], self.files[path][1]


class TestAssetSnapshot(unittest.TestCase):
    """Test AssetSnapshot capture."""

    def test_filters_by_extension_case_insensitively(self):
        provider = FakeProvider({
            "assets/a.png": (1, 1, 1),
            "assets/b.PNG": (1, 1, 1),
            "assets/c.txt": (None, None, 1),
        })

        snapshot = AssetSnapshot.capture(provider, "assets", [".png"])

        self.assertEqual(snapshot.paths, ("assets/a.png", "assets/b.PNG"))
        self.assertEqual(len(snapshot), 2)
        self.assertEqual(provider.listings, 1)

    def test_normalizes_paths(self):
        provider = FakeProvider({"assets\\ui\\a.png": (1, 1, 1)})

        snapshot = AssetSnapshot.capture(provider, "assets\\", [".png"])

        self.assertEqual(snapshot.root, "assets")
        self.assertEqual(snapshot.paths, ("assets/ui/a.png",))


class TestProbing(unittest.TestCase):
    """Test concurrent metadata probes."""

    def setUp(self):
        self.files = {f"assets/img{i}.png": (i + 1, i + 2, 100 + i) for i in range(20)}
        self.provider = FakeProvider(self.files)

    def test_probe_images(self):
        images = probe_images(self.provider, list(self.files), workers=4)

        self.assertEqual(list(images), list(self.files))
        self.assertEqual(images["assets/img3.png"], ImageInfo("assets/img3.png", 4, 5, 103))

    def test_probe_sizes(self):
        sizes = probe_sizes(self.provider, list(self.files), workers=4)

        self.assertEqual(sizes["assets/img0.png"].size, 100)
        self.assertEqual(len(sizes), 20)

    def test_probe_failure_propagates(self):
        self.files["assets/bad.png"] = (None, None, 1)

        with self.assertRaises(DecodeFailure):
            probe_images(self.provider, list(self.files), workers=4)


class TestLocalAssetProvider(unittest.TestCase):
    """Test LocalAssetProvider against a temporary directory."""

    def setUp(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.root = normalize_path(self.temp_dir)
        for relative in ["b/z.png", "b/a.png", "a/m.png", "top.png"]:
            path = os.path.join(self.temp_dir, relative)
            os.makedirs(os.path.dirname(path), exist_ok=True)
            Image.new("RGBA", (3, 5)).save(path)
        self.provider = LocalAssetProvider()

    def tearDown(self):
        """Clean up test fixtures."""
        shutil.rmtree(self.temp_dir)

    def test_listing_is_sorted_and_stable(self):
        files = self.provider.list_all_files(self.temp_dir)

        self.assertEqual(files, [
            f"{self.root}/top.png",
            f"{self.root}/a/m.png",
            f"{self.root}/b/a.png",
            f"{self.root}/b/z.png",
        ])
        self.assertEqual(files, self.provider.list_all_files(self.temp_dir))

    def test_read_image_dimensions(self):
        self.assertEqual(self.provider.read_image_dimensions(f"{self.root}/top.png"), (3, 5))

    def test_stat_size(self):
        path = f"{self.root}/top.png"

        self.assertEqual(self.provider.stat_size(path), os.path.getsize(path))

    def test_stat_missing_file(self):
        with self.assertRaises(DecodeFailure):
            self.provider.stat_size(f"{self.root}/missing.png")

    def test_missing_root(self):
        with self.assertRaises(ConfigurationError):
            self.provider.list_all_files(os.path.join(self.temp_dir, "nope"))


if __name__ == '__main__':
    unittest.main()
