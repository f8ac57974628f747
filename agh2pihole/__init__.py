"""
agh2pihole package - AdGuard to Pi-hole Blocklist Converter

Modules:
    classifier: Classify raw lines as blocked / allowed / ignored
    reducer: Deduplicate and sort classified domains
    custom_rules: Extract ||domain^ tokens from free-form user rules
    sources: Filter source definitions and url#name list files
    downloader: Async list retrieval (HTTP or local path)
    backup: Read filters and user rules from an AdGuard Home YAML backup
    writer: Write converted domain lists
    pihole_script: Generate the Pi-hole import script
    pipeline: Main processing pipeline and CLI
"""

__version__ = "1.0.0"
