"""Test module for ultra_robust_transliterator package initialization."""


def test_package_import() -> None:
    """Test that the package can be imported successfully."""
    # Arrange & Act
    import ultra_robust_transliterator

    # Assert
    assert ultra_robust_transliterator is not None


def test_package_has_version() -> None:
    """Test that the package has a version attribute."""
    # Arrange & Act
    import ultra_robust_transliterator

    # Assert
    assert isinstance(ultra_robust_transliterator.__version__, str)
    assert ultra_robust_transliterator.__version__ == "0.1.0"


def test_package_has_author() -> None:
    """Test that the package has an author attribute."""
    # Arrange & Act
    import ultra_robust_transliterator

    # Assert
    assert ultra_robust_transliterator.__author__ == "Ultra Robust Transliterator Team"


def test_package_exports() -> None:
    """Test that the public API is exported at package level."""
    # Arrange & Act
    import ultra_robust_transliterator

    # Assert
    for name in ultra_robust_transliterator.__all__:
        assert hasattr(ultra_robust_transliterator, name)
    assert "transliterate" in ultra_robust_transliterator.__all__
    assert "TableStore" in ultra_robust_transliterator.__all__


def test_top_level_transliterate() -> None:
    """Test the level 1 entry point end to end."""
    # Arrange
    from ultra_robust_transliterator import transliterate

    # Act
    result = transliterate("Ä Ö Ü", "de")

    # Assert
    assert result == "Ae Oe Ue"
