# Copyright (C) 2010-2026 Evolveum and contributors
#
# Licensed under the EUPL-1.2 or later.

"""
Content sniffing for SOAP/WSDL/XSD uploads.

A file counts as SOAP material when its root element lives in one of the WSDL, XML Schema or
SOAP envelope namespaces. Heads cut off mid-document do not parse, so textual markers decide then.
"""

import logging
import re
from typing import Iterable, Optional

from lxml import etree  # type: ignore

from ...common.files import UploadedFile
from ...config import config

logger = logging.getLogger(__name__)

SOAP_NAMESPACES = frozenset(
    {
        "http://schemas.xmlsoap.org/wsdl/",
        "http://www.w3.org/ns/wsdl",
        "http://www.w3.org/2001/XMLSchema",
        "http://schemas.xmlsoap.org/soap/envelope/",
        "http://www.w3.org/2003/05/soap-envelope",
    }
)

_MARKERS = re.compile(
    r"<\s*(?:[\w-]+:)?(?:definitions|description)\b[^>]*(?:wsdl|schemas\.xmlsoap\.org)"
    r"|<\s*(?:xs|xsd|wsdl|soap|soapenv|soap12):(?:schema|definitions|Envelope|types)\b"
    r"|xmlns(?::\w+)?\s*=\s*[\"']http://schemas\.xmlsoap\.org/wsdl/",
    re.IGNORECASE,
)

_XML_SUFFIXES = (".xml", ".wsdl", ".xsd")


def _root_namespace(text: str) -> Optional[str]:
    parser = etree.XMLParser(resolve_entities=False, no_network=True, huge_tree=False)
    try:
        root = etree.fromstring(text.encode("utf-8"), parser=parser)
    except etree.XMLSyntaxError:
        return None
    return etree.QName(root).namespace


def is_soap_file(file: UploadedFile, limit: Optional[int] = None) -> bool:
    """Decide whether a single file looks like WSDL, XSD or a SOAP envelope."""
    text = file.text(limit if limit is not None else config.upload.scim_read_limit)
    if not text.startswith("<") and not file.has_suffix(*_XML_SUFFIXES):
        return False

    namespace = _root_namespace(text)
    if namespace is not None:
        return namespace in SOAP_NAMESPACES
    return bool(_MARKERS.search(text))


def detect_soap(files: Iterable[UploadedFile]) -> bool:
    """Return True when at least one file of the batch is SOAP material."""
    for file in files:
        if is_soap_file(file):
            logger.debug("[Classifier] %s detected as SOAP/WSDL", file.filename)
            return True
    return False
