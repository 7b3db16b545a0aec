"""
Document Processor - Turn uploaded files into clean plain text

Supports PDF, DOCX, legacy DOC (best effort) and plain text.

License: MIT
"""

from pathlib import Path
import logging

from ..exceptions import DocumentParseError
from ..utils.helpers import clean_text

logger = logging.getLogger(__name__)


class DocumentProcessor:
    """
    Multi-format document parser.

    The format is chosen from the MIME type first, then the file extension;
    anything unrecognized is read as UTF-8 text.
    """

    def parse_document(self, file_path: Path, mime_type: str = "") -> str:
        """
        Extract text from a document file.

        Args:
            file_path: Path to the uploaded file
            mime_type: MIME type reported by the client

        Returns:
            Raw extracted text

        Raises:
            FileNotFoundError: If file doesn't exist
            DocumentParseError: If the file cannot be parsed
        """
        file_path = Path(file_path)
        if not file_path.exists():
            raise FileNotFoundError(f"File not found: {file_path}")

        mime_type = (mime_type or "").lower()
        file_ext = file_path.suffix.lower()

        try:
            if "pdf" in mime_type or file_ext == ".pdf":
                text = self.parse_pdf(file_path)
            elif file_ext == ".doc" or "msword" in mime_type:
                text = self.parse_doc(file_path)
            elif "officedocument.wordprocessingml" in mime_type or file_ext == ".docx":
                text = self.parse_docx(file_path)
            else:
                text = self.parse_text(file_path)

        except DocumentParseError:
            raise
        except Exception as e:
            logger.error(f"Error processing file {file_path}: {str(e)}")
            raise DocumentParseError(f"Failed to parse document: {str(e)}") from e

        logger.info(f"Successfully processed {file_path.name}, extracted {len(text)} characters")
        return text

    def parse_text(self, file_path: Path) -> str:
        """Read a plain text file."""
        return file_path.read_text(encoding="utf-8", errors="replace")

    def parse_pdf(self, file_path: Path) -> str:
        """
        Extract text from PDF file.

        Pages that fail to extract are skipped with a warning.
        """
        import PyPDF2

        with open(file_path, "rb") as file:
            pdf_reader = PyPDF2.PdfReader(file)
            pages = []

            for page_num, page in enumerate(pdf_reader.pages):
                try:
                    pages.append(page.extract_text() or "")
                except Exception as e:
                    logger.warning(f"Error extracting page {page_num} from {file_path}: {str(e)}")
                    continue

        return "\n".join(pages).strip()

    def parse_docx(self, file_path: Path) -> str:
        """Extract paragraph text from DOCX file."""
        import docx

        doc = docx.Document(str(file_path))
        return "\n".join(p.text for p in doc.paragraphs if p.text.strip())

    def parse_doc(self, file_path: Path) -> str:
        """Legacy DOC: try the DOCX reader, fall back to plain text."""
        try:
            return self.parse_docx(file_path)
        except Exception as e:
            logger.warning(f"DOC file {file_path.name} is not DOCX-readable ({str(e)}); reading as text")
            return self.parse_text(file_path)


def clean_document_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and strip the ends."""
    return clean_text(text)


def parse_document(file_path: Path, mime_type: str = "") -> str:
    """Parse a file with a default DocumentProcessor."""
    return DocumentProcessor().parse_document(file_path, mime_type)
