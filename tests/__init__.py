"""Test suite for the image_enhancer package."""
