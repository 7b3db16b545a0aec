"""
Unit Tests for Document Processor

Tests the document parsing functionality including:
- Format selection by MIME type and extension
- PDF and DOCX extraction
- Text cleaning
- Error cases
"""

import pytest
from pathlib import Path
from unittest.mock import patch, Mock

from category_rag.core import DocumentProcessor, clean_document_text, parse_document
from category_rag.exceptions import DocumentParseError


@pytest.fixture
def document_processor():
    return DocumentProcessor()


class TestDocumentProcessor:
    """Test cases for DocumentProcessor class."""

    def test_parse_file_not_found(self, document_processor):
        """Test parsing non-existent file."""
        with pytest.raises(FileNotFoundError):
            document_processor.parse_document(Path("nonexistent.txt"))

    def test_parse_text_file(self, document_processor, tmp_path):
        """Test parsing .txt file."""
        file_path = tmp_path / "policy.txt"
        file_path.write_text("This is test content.", encoding="utf-8")

        assert document_processor.parse_document(file_path) == "This is test content."

    def test_parse_markdown_as_text(self, document_processor, tmp_path):
        """Test that .md files are read as plain text."""
        file_path = tmp_path / "notes.md"
        file_path.write_text("# Header\nThis is markdown content.", encoding="utf-8")

        text = document_processor.parse_document(file_path, "text/markdown")

        assert "Header" in text
        assert "markdown content" in text

    def test_parse_unknown_extension_as_text(self, document_processor, tmp_path):
        """Unrecognized formats are read as UTF-8 text."""
        file_path = tmp_path / "data.xyz"
        file_path.write_bytes("café menu".encode("utf-8"))

        assert document_processor.parse_document(file_path) == "café menu"

    def test_invalid_utf8_is_replaced(self, document_processor, tmp_path):
        file_path = tmp_path / "broken.txt"
        file_path.write_bytes(b"valid \xff\xfe bytes")

        text = document_processor.parse_document(file_path)

        assert text.startswith("valid ")
        assert "�" in text

    def test_parse_pdf_success(self, document_processor, tmp_path):
        """Test successful PDF parsing."""
        file_path = tmp_path / "contract.pdf"
        file_path.write_bytes(b"%PDF-1.4")

        mock_pypdf2 = Mock()
        first_page, second_page = Mock(), Mock()
        first_page.extract_text.return_value = "PDF page one"
        second_page.extract_text.return_value = "PDF page two"
        mock_pypdf2.PdfReader.return_value.pages = [first_page, second_page]

        with patch.dict("sys.modules", {"PyPDF2": mock_pypdf2}):
            text = document_processor.parse_document(file_path)

        assert text == "PDF page one\nPDF page two"

    def test_parse_pdf_skips_failing_pages(self, document_processor, tmp_path):
        file_path = tmp_path / "scan.pdf"
        file_path.write_bytes(b"%PDF-1.4")

        mock_pypdf2 = Mock()
        bad_page, good_page = Mock(), Mock()
        bad_page.extract_text.side_effect = Exception("corrupt page")
        good_page.extract_text.return_value = "Readable page"
        mock_pypdf2.PdfReader.return_value.pages = [bad_page, good_page]

        with patch.dict("sys.modules", {"PyPDF2": mock_pypdf2}):
            text = document_processor.parse_document(file_path)

        assert text == "Readable page"

    def test_pdf_selected_by_mime_type(self, document_processor, tmp_path):
        """MIME type wins over the file extension."""
        file_path = tmp_path / "upload.bin"
        file_path.write_bytes(b"%PDF-1.4")

        with patch.object(document_processor, "parse_pdf", return_value="from pdf") as mock_parse:
            text = document_processor.parse_document(file_path, "application/pdf")

        assert text == "from pdf"
        mock_parse.assert_called_once()

    def test_parse_docx_success(self, document_processor, tmp_path):
        """Test successful DOCX parsing."""
        file_path = tmp_path / "handbook.docx"
        file_path.write_bytes(b"PK")

        mock_docx = Mock()
        paragraphs = [Mock(text="DOCX paragraph content"), Mock(text="   "), Mock(text="Second")]
        mock_docx.Document.return_value.paragraphs = paragraphs

        with patch.dict("sys.modules", {"docx": mock_docx}):
            text = document_processor.parse_document(file_path)

        assert text == "DOCX paragraph content\nSecond"

    def test_parse_doc_falls_back_to_text(self, document_processor, tmp_path):
        """Legacy .doc files that are not DOCX-readable are read as text."""
        file_path = tmp_path / "legacy.doc"
        file_path.write_text("old word file", encoding="utf-8")

        mock_docx = Mock()
        mock_docx.Document.side_effect = ValueError("not a zip file")

        with patch.dict("sys.modules", {"docx": mock_docx}):
            text = document_processor.parse_document(file_path)

        assert text == "old word file"

    def test_msword_mime_type_uses_doc_fallback(self, document_processor, tmp_path):
        """Browsers label legacy Word uploads application/msword."""
        file_path = tmp_path / "legacy.doc"
        file_path.write_text("plain legacy words", encoding="utf-8")

        text = document_processor.parse_document(file_path, "application/msword")

        assert text == "plain legacy words"

    def test_msword_mime_type_without_extension(self, document_processor, tmp_path):
        file_path = tmp_path / "upload"
        file_path.write_text("untitled word upload", encoding="utf-8")

        mock_docx = Mock()
        mock_docx.Document.side_effect = ValueError("not a zip file")

        with patch.dict("sys.modules", {"docx": mock_docx}):
            text = document_processor.parse_document(file_path, "application/msword")

        assert text == "untitled word upload"

    def test_error_handling_during_processing(self, document_processor, tmp_path):
        """Parser failures surface as DocumentParseError."""
        file_path = tmp_path / "error.txt"
        file_path.write_text("x")

        with patch.object(document_processor, "parse_text", side_effect=OSError("Read error")):
            with pytest.raises(DocumentParseError, match="Read error"):
                document_processor.parse_document(file_path)

    def test_module_level_parse_document(self, tmp_path):
        file_path = tmp_path / "a.txt"
        file_path.write_text("hello")

        assert parse_document(file_path, "text/plain") == "hello"


class TestCleanDocumentText:
    @pytest.mark.parametrize(
        "raw,expected",
        [
            ("  hello   world  ", "hello world"),
            ("line one\n\n\tline two", "line one line two"),
            ("", ""),
            ("   \n\t  ", ""),
        ],
    )
    def test_whitespace_is_collapsed(self, raw, expected):
        assert clean_document_text(raw) == expected
