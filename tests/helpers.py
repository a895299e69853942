"""
Builders for small DOCX packages used across the test suite.

Packages are assembled from XML snippets with zipfile; images are real
PNG/JPEG bytes produced by Pillow.
"""

import io
import zipfile
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

from lxml import etree
from PIL import Image

W_NS = "http://schemas.openxmlformats.org/wordprocessingml/2006/main"
R_NS = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT = "http://schemas.openxmlformats.org/officeDocument/2006/relationships"
RT_IMAGE = f"{RT}/image"
RT_HYPERLINK = f"{RT}/hyperlink"
RT_STYLES = f"{RT}/styles"
RT_NUMBERING = f"{RT}/numbering"

NS_DECL = (
    f'xmlns:w="{W_NS}" xmlns:r="{R_NS}" '
    'xmlns:wp="http://schemas.openxmlformats.org/drawingml/2006/wordprocessingDrawing" '
    'xmlns:a="http://schemas.openxmlformats.org/drawingml/2006/main" '
    'xmlns:pic="http://schemas.openxmlformats.org/drawingml/2006/picture"'
)

NSMAP = {"w": W_NS, "r": R_NS, "a": "http://schemas.openxmlformats.org/drawingml/2006/main"}

IMAGE_TYPES = {"png": "image/png", "jpeg": "image/jpeg", "jpg": "image/jpeg", "gif": "image/gif"}

Rel = Tuple[str, str, str, str]


def w(tag: str) -> str:
    return f"{{{W_NS}}}{tag}"


def image_bytes(color=(200, 30, 30), size=(4, 4), fmt: str = "PNG") -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color=color).save(buffer, format=fmt)
    return buffer.getvalue()


# --- body snippets -------------------------------------------------------


def run(text: str = "text", size: Optional[int] = None, style: Optional[str] = None) -> str:
    props = ""
    if style:
        props += f'<w:rStyle w:val="{style}"/>'
    if size is not None:
        props += f'<w:sz w:val="{size}"/>'
    rpr = f"<w:rPr>{props}</w:rPr>" if props else ""
    return f"<w:r>{rpr}<w:t>{text}</w:t></w:r>"


def paragraph(
    text: str = "text",
    style: Optional[str] = None,
    num_id: Optional[int] = None,
    size: Optional[int] = None,
    jc: Optional[str] = None,
    runs: Optional[str] = None,
    sect_pr: str = "",
) -> str:
    ppr = ""
    if style:
        ppr += f'<w:pStyle w:val="{style}"/>'
    if num_id is not None:
        ppr += f'<w:numPr><w:ilvl w:val="0"/><w:numId w:val="{num_id}"/></w:numPr>'
    if jc is not None:
        ppr += '<w:jc/>' if jc == "" else f'<w:jc w:val="{jc}"/>'
    ppr += sect_pr
    ppr_xml = f"<w:pPr>{ppr}</w:pPr>" if ppr else ""
    content = runs if runs is not None else run(text, size=size)
    return f"<w:p>{ppr_xml}{content}</w:p>"


def table(cell_xml: str, style: Optional[str] = None) -> str:
    tbl_pr = f'<w:tblPr><w:tblStyle w:val="{style}"/></w:tblPr>' if style else "<w:tblPr/>"
    return f"<w:tbl>{tbl_pr}<w:tblGrid><w:gridCol/></w:tblGrid><w:tr><w:tc>{cell_xml}</w:tc></w:tr></w:tbl>"


def image_run(rel_id: str) -> str:
    return (
        "<w:r><w:drawing><wp:inline><a:graphic><a:graphicData>"
        f'<pic:pic><pic:blipFill><a:blip r:embed="{rel_id}"/></pic:blipFill></pic:pic>'
        "</a:graphicData></a:graphic></wp:inline></w:drawing></w:r>"
    )


def hyperlink(rel_id: str, text: str = "link") -> str:
    return f'<w:p><w:hyperlink r:id="{rel_id}">{run(text)}</w:hyperlink></w:p>'


def sect_pr(width: int = 11906, height: int = 16838, margin: int = 1440, grid: bool = True,
            orient: Optional[str] = None) -> str:
    orient_attr = f' w:orient="{orient}"' if orient else ""
    grid_xml = '<w:docGrid w:linePitch="360"/>' if grid else ""
    return (
        f'<w:sectPr><w:pgSz w:w="{width}" w:h="{height}"{orient_attr}/>'
        f'<w:pgMar w:top="{margin}" w:right="{margin}" w:bottom="{margin}" w:left="{margin}"/>'
        f"{grid_xml}</w:sectPr>"
    )


# --- definition parts ----------------------------------------------------


def style(
    style_id: str,
    style_type: str = "paragraph",
    name: Optional[str] = None,
    default: bool = False,
    based_on: Optional[str] = None,
    link: Optional[str] = None,
    next_style: Optional[str] = None,
    size: Optional[int] = None,
    jc: Optional[str] = None,
    num_id: Optional[int] = None,
) -> str:
    default_attr = ' w:default="1"' if default else ""
    parts = [f'<w:name w:val="{name or style_id}"/>']
    if based_on:
        parts.append(f'<w:basedOn w:val="{based_on}"/>')
    if next_style:
        parts.append(f'<w:next w:val="{next_style}"/>')
    if link:
        parts.append(f'<w:link w:val="{link}"/>')
    ppr = ""
    if num_id is not None:
        ppr += f'<w:numPr><w:numId w:val="{num_id}"/></w:numPr>'
    if jc is not None:
        ppr += '<w:jc/>' if jc == "" else f'<w:jc w:val="{jc}"/>'
    if ppr:
        parts.append(f"<w:pPr>{ppr}</w:pPr>")
    if size is not None:
        parts.append(f'<w:rPr><w:sz w:val="{size}"/><w:szCs w:val="{size}"/></w:rPr>')
    return f'<w:style w:type="{style_type}"{default_attr} w:styleId="{style_id}">{"".join(parts)}</w:style>'


def styles_part(*styles: str, doc_default_size: Optional[int] = None) -> str:
    defaults = ""
    if doc_default_size is not None:
        defaults = (
            "<w:docDefaults><w:rPrDefault><w:rPr>"
            f'<w:sz w:val="{doc_default_size}"/><w:szCs w:val="{doc_default_size}"/>'
            "</w:rPr></w:rPrDefault></w:docDefaults>"
        )
    return f'<w:styles xmlns:w="{W_NS}">{defaults}{"".join(styles)}</w:styles>'


def numbering_part(lists: Iterable[Tuple[int, int]], style_link: Optional[str] = None) -> str:
    """numbering.xml with one abstractNum per distinct abstract id and one num per (numId, abstractNumId)."""
    lists = list(lists)
    abstracts = []
    for abstract_id in sorted({abstract_id for _, abstract_id in lists}):
        link = f'<w:styleLink w:val="{style_link}"/>' if style_link else ""
        abstracts.append(
            f'<w:abstractNum w:abstractNumId="{abstract_id}">{link}'
            '<w:lvl w:ilvl="0"><w:start w:val="1"/><w:numFmt w:val="decimal"/>'
            '<w:lvlText w:val="%1."/></w:lvl></w:abstractNum>'
        )
    nums = [
        f'<w:num w:numId="{num_id}"><w:abstractNumId w:val="{abstract_id}"/></w:num>'
        for num_id, abstract_id in lists
    ]
    return f'<w:numbering xmlns:w="{W_NS}">{"".join(abstracts)}{"".join(nums)}</w:numbering>'


# --- package assembly ----------------------------------------------------


def build_docx(
    path: Path,
    body: str,
    styles: Optional[str] = None,
    numbering: Optional[str] = None,
    images: Optional[Dict[str, Tuple[str, bytes]]] = None,
    extra_rels: Sequence[Rel] = (),
    extra_parts: Optional[Dict[str, bytes]] = None,
    declare_image_types: bool = True,
    main_part: str = "word/document.xml",
) -> Path:
    """
    Write a minimal DOCX package.

    Args:
        path: Destination file
        body: Inner XML of w:body
        styles: Full styles.xml content (None: no styles part)
        numbering: Full numbering.xml content (None: no numbering part)
        images: rel id -> (target relative to the main part directory, bytes)
        extra_rels: Additional (id, type, target, target mode) relationships
        extra_parts: Additional raw parts by name
        declare_image_types: Whether image extensions get a Default content type
        main_part: Name of the main document part
    """
    main_dir = main_part.rsplit("/", 1)[0]
    main_file = main_part.rsplit("/", 1)[1]
    parts: Dict[str, bytes] = {}
    rels: List[Rel] = []
    overrides = {main_part: "application/vnd.openxmlformats-officedocument.wordprocessingml.document.main+xml"}
    defaults = {"rels": "application/vnd.openxmlformats-package.relationships+xml", "xml": "application/xml"}

    parts[main_part] = f'<?xml version="1.0" encoding="UTF-8" standalone="yes"?><w:document {NS_DECL}><w:body>{body}</w:body></w:document>'.encode()

    if styles is not None:
        parts[f"{main_dir}/styles.xml"] = styles.encode()
        overrides[f"{main_dir}/styles.xml"] = "application/vnd.openxmlformats-officedocument.wordprocessingml.styles+xml"
        rels.append(("rId1", RT_STYLES, "styles.xml", "Internal"))
    if numbering is not None:
        parts[f"{main_dir}/numbering.xml"] = numbering.encode()
        overrides[f"{main_dir}/numbering.xml"] = (
            "application/vnd.openxmlformats-officedocument.wordprocessingml.numbering+xml"
        )
        rels.append(("rId2", RT_NUMBERING, "numbering.xml", "Internal"))

    for rel_id, (target, data) in (images or {}).items():
        parts[f"{main_dir}/{target}"] = data
        extension = target.rsplit(".", 1)[-1].lower()
        if declare_image_types and extension in IMAGE_TYPES:
            defaults[extension] = IMAGE_TYPES[extension]
        rels.append((rel_id, RT_IMAGE, target, "Internal"))

    rels.extend(extra_rels)
    for name, data in (extra_parts or {}).items():
        parts[name] = data

    content_types = "".join(
        f'<Default Extension="{ext}" ContentType="{ct}"/>' for ext, ct in defaults.items()
    ) + "".join(f'<Override PartName="/{name}" ContentType="{ct}"/>' for name, ct in overrides.items())

    with zipfile.ZipFile(path, "w", zipfile.ZIP_DEFLATED) as zf:
        zf.writestr(
            "[Content_Types].xml",
            f'<Types xmlns="http://schemas.openxmlformats.org/package/2006/content-types">{content_types}</Types>',
        )
        zf.writestr(
            "_rels/.rels",
            '<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">'
            f'<Relationship Id="rId1" Type="{RT}/officeDocument" Target="{main_part}"/></Relationships>',
        )
        for name, data in parts.items():
            zf.writestr(name, data)
        if rels:
            entries = "".join(
                f'<Relationship Id="{rid}" Type="{rtype}" Target="{target}"'
                + (' TargetMode="External"' if mode == "External" else "")
                + "/>"
                for rid, rtype, target, mode in rels
            )
            zf.writestr(
                f"{main_dir}/_rels/{main_file}.rels",
                f'<Relationships xmlns="http://schemas.openxmlformats.org/package/2006/relationships">{entries}</Relationships>',
            )
    return path


# --- reading results -----------------------------------------------------


def read_part(path: Path, part_name: str) -> etree._Element:
    with zipfile.ZipFile(path) as zf:
        return etree.fromstring(zf.read(part_name))


def read_bytes(path: Path, part_name: str) -> bytes:
    with zipfile.ZipFile(path) as zf:
        return zf.read(part_name)


def part_names(path: Path) -> List[str]:
    with zipfile.ZipFile(path) as zf:
        return zf.namelist()


def read_relationships(path: Path, rels_part: str = "word/_rels/document.xml.rels") -> Dict[str, Tuple[str, str, str]]:
    """rel id -> (type, target, target mode)."""
    root = read_part(path, rels_part)
    return {
        rel.get("Id"): (rel.get("Type"), rel.get("Target"), rel.get("TargetMode", "Internal"))
        for rel in root
    }


def vals(root: etree._Element, xpath: str) -> List[str]:
    return [element.get(w("val")) for element in root.xpath(xpath, namespaces=NSMAP)]
