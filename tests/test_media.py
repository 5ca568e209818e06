from common.media import MediaClassifier, MediaKind


class TestMediaClassifier:
    """Test cases for extension based media classification."""

    def test_default_image_extensions(self, classifier: MediaClassifier) -> None:
        for name in ["a.jpg", "a.jpeg", "a.png", "a.gif", "a.bmp", "a.webp"]:
            assert classifier.classify(name) is MediaKind.IMAGE

    def test_extension_match_is_case_insensitive(self, classifier: MediaClassifier) -> None:
        assert classifier.classify("c.JPG") is MediaKind.IMAGE
        assert classifier.classify("clip.MoV") is MediaKind.VIDEO

    def test_ignored_names(self, classifier: MediaClassifier) -> None:
        assert classifier.classify("a.txt") is MediaKind.IGNORED
        assert classifier.classify(".hidden.png") is MediaKind.IGNORED
        assert classifier.classify("png") is MediaKind.IGNORED
        assert classifier.classify("") is MediaKind.IGNORED
        assert not classifier.is_qualifying("notes.md")

    def test_classifies_by_file_name_of_a_path(self, classifier: MediaClassifier) -> None:
        assert classifier.classify("/tmp/out/comic.png") is MediaKind.IMAGE
        assert classifier.classify("/tmp/.cache/comic.png") is MediaKind.IMAGE

    def test_custom_extension_lists(self) -> None:
        # Given: images limited to png, video disabled
        classifier = MediaClassifier(image_extensions=[".PNG"], video_extensions=[])

        # Then:
        assert classifier.classify("a.png") is MediaKind.IMAGE
        assert classifier.classify("a.jpg") is MediaKind.IGNORED
        assert classifier.classify("a.mp4") is MediaKind.IGNORED
