"""
Body extraction and reassembly for XHTML documents

The translatable part of a document is the inner content of its <body>.
After translation the new body content is parsed back into the original
document tree, so the <head>, the body attributes, the XML declaration and
the DOCTYPE all survive. When the document or the translated markup cannot
be parsed, the translated text is returned on its own and the result is
flagged as not structure-preserving.
"""
import re
from dataclasses import dataclass
from typing import Optional, Union

from lxml import etree

from epub_scribe.core.epub.exceptions import BodyExtractionError, XmlParsingError

BODY_PATTERN = re.compile(r'<body\b[^>]*>(.*)</body\s*>', re.IGNORECASE | re.DOTALL)


@dataclass
class ReassemblyResult:
    """Serialized document plus whether its structure was kept.

    Attributes:
        content: Document bytes (UTF-8)
        structure_preserved: False when the lossy text-only fallback was used
        error: Why the fallback was used, if it was
    """
    content: bytes
    structure_preserved: bool
    error: Optional[str] = None


def extract_body(document_text: str) -> Optional[str]:
    """
    Exact inner text of the document's <body>.

    Args:
        document_text: Full XHTML document

    Returns:
        The characters between <body ...> and </body>, or None without a body
    """
    match = BODY_PATTERN.search(document_text)
    if match is None:
        return None
    return match.group(1)


def _to_bytes(document: Union[str, bytes]) -> bytes:
    if isinstance(document, bytes):
        return document
    return document.encode('utf-8')


def parse_document(document: Union[str, bytes]) -> etree._Element:
    """
    Parse a document, strictly first and then with a recovering parser.

    Raises:
        XmlParsingError: If neither parser produces a tree
    """
    data = _to_bytes(document)
    strict_error = None
    try:
        return etree.fromstring(data, etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError as e:
        strict_error = e

    try:
        root = etree.fromstring(data, etree.XMLParser(recover=True, resolve_entities=False))
    except etree.XMLSyntaxError as e:
        root = None
        strict_error = e
    if root is None:
        raise XmlParsingError(
            "Document could not be parsed",
            original_error=strict_error,
            content_preview=data[:200].decode('utf-8', errors='replace'),
        )
    return root


def find_body(root: etree._Element) -> etree._Element:
    """
    Locate the <body> element, namespaced or not.

    Raises:
        BodyExtractionError: If there is no body
    """
    # Try XHTML namespace first, then fallback to no namespace
    body = root.find('.//{http://www.w3.org/1999/xhtml}body')
    if body is None:
        body = root.find('.//body')
    if body is None and etree.QName(root).localname == 'body':
        body = root
    if body is None:
        raise BodyExtractionError("No <body> element found")
    return body


def build_body(original_body: etree._Element, translated_body: str) -> etree._Element:
    """
    Parse translated markup into a new <body> matching the original one.

    The wrapper declares every namespace in scope on the original body so
    prefixed attributes such as ``epub:type`` stay bound.

    Raises:
        XmlParsingError: If the markup cannot be parsed at all
    """
    declarations = []
    for prefix, uri in original_body.nsmap.items():
        if prefix is None:
            declarations.append(f'xmlns="{uri}"')
        else:
            declarations.append(f'xmlns:{prefix}="{uri}"')
    opening = '<body ' + ' '.join(declarations) + '>' if declarations else '<body>'
    wrapped = f"{opening}{translated_body}</body>".encode('utf-8')

    try:
        new_body = etree.fromstring(wrapped, etree.XMLParser(resolve_entities=False))
    except etree.XMLSyntaxError:
        parser = etree.XMLParser(recover=True, encoding='utf-8', resolve_entities=False)
        try:
            new_body = etree.fromstring(wrapped, parser)
        except etree.XMLSyntaxError as e:
            raise XmlParsingError("Translated body could not be parsed", original_error=e,
                                  content_preview=translated_body[:200]) from e
        if new_body is None:
            raise XmlParsingError("Translated body could not be parsed",
                                  content_preview=translated_body[:200])

    if new_body.tag != original_body.tag:
        raise XmlParsingError(f"Translated body parsed as <{new_body.tag}>",
                              content_preview=translated_body[:200])

    for name, value in original_body.attrib.items():
        new_body.set(name, value)
    new_body.tail = original_body.tail
    return new_body


def serialize_document(root: etree._Element) -> bytes:
    """Serialize a whole document with XML declaration and DOCTYPE."""
    tree = root.getroottree()
    doctype = tree.docinfo.doctype
    if doctype:
        return etree.tostring(tree, xml_declaration=True, encoding='utf-8', doctype=doctype)
    return etree.tostring(tree, xml_declaration=True, encoding='utf-8')


def reassemble_document(original_document: Union[str, bytes], translated_body: str) -> ReassemblyResult:
    """
    Swap the translated body content into the original document.

    Args:
        original_document: Original XHTML document
        translated_body: Translated inner body markup (tokens already restored)

    Returns:
        ReassemblyResult; on any failure its content is ``translated_body`` alone
    """
    try:
        root = parse_document(original_document)
        body = find_body(root)
        new_body = build_body(body, translated_body)

        parent = body.getparent()
        if parent is None:
            root = new_body
        else:
            parent.replace(body, new_body)

        return ReassemblyResult(content=serialize_document(root), structure_preserved=True)
    except (XmlParsingError, BodyExtractionError, etree.LxmlError, ValueError) as e:
        return ReassemblyResult(
            content=translated_body.encode('utf-8'),
            structure_preserved=False,
            error=str(e),
        )
