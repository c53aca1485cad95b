"""
statusdeck — Work Done status deck generator.

Modules:
    records       — Record dataclass, sentinel defaults, wire-format conversion
    errors        — InputRejected / DecodeFailure exception hierarchy
    config        — config.yaml loader with built-in defaults
    tokenizer     — line splitting and HTML markup stripping
    columns       — fuzzy header matching for spreadsheet columns
    strategies    — delimiter-strategy chain for text lines
    normalizer    — maps raw cells / columns onto the five-field Record
    fallback      — known-pattern recognizer and universal fallback record
    loaders       — format detection and byte decoding (txt, docx, html, xlsx, xls)
    extraction    — per-format extraction pipelines
    pagination    — slide pagination with global row numbering
    slides        — python-pptx slide deck
    html_report   — standalone HTML report with Plotly status chart
    pdf_deck      — ReportLab landscape PDF deck
    excel_export  — openpyxl workbook export
    remote        — client for a remote slide-rendering service
"""
