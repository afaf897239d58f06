from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


@dataclass(frozen=True)
class LayoutSettings:
    """Geometry and wording of a prescription page, in millimetres."""

    header_lines: tuple[str, ...] = (
        'PREFEITURA MUNICIPAL DE PEROBAL',
        'SECRETARIA MUNICIPAL DE SAÚDE',
        'Rua Principal, 123 - Centro - Perobal/PR',
        'Telefone: (44) 3000-0000',
    )
    # Leading header lines printed larger and bold.
    header_emphasis_lines: int = 2
    document_title: str = 'RECEITA MÉDICA'
    signature_caption: str = 'Assinatura e Carimbo do Médico'
    controlled_caption: str = '*** MEDICAMENTO CONTROLADO ***'

    margin: float = 20.0
    header_top: float = 25.0
    header_line_step: float = 7.0
    rule_gap: float = 9.0
    title_gap: float = 13.0
    marker_gap: float = 7.0
    patient_line_step: float = 8.0
    patient_fields: int = 4
    patient_block_gap: float = 13.0
    line_height: float = 6.0
    entry_gap: float = 3.0
    entry_lines: int = 4
    entry_indent: float = 5.0
    medicines_heading_height: float = 12.0
    section_gap: float = 10.0
    observations_heading_height: float = 8.0
    signature_offset: float = 60.0
    signature_caption_gap: float = 8.0

    # Average glyph width at body size; drives word wrapping of observations.
    char_width: float = 2.2


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file='.env',
        env_file_encoding='utf-8',
        case_sensitive=False,
        extra='ignore',
    )

    output_dir: Path = Field(
        default=Path('./receitas'),
        validation_alias=AliasChoices('SISMED_OUTPUT_DIR', 'OUTPUT_DIR'),
    )

    # Comma-separated institution header lines
    header_lines: str = Field(
        default=(
            'PREFEITURA MUNICIPAL DE PEROBAL,'
            'SECRETARIA MUNICIPAL DE SAÚDE,'
            'Rua Principal\\, 123 - Centro - Perobal/PR,'
            'Telefone: (44) 3000-0000'
        ),
        validation_alias=AliasChoices('SISMED_HEADER_LINES', 'HEADER_LINES'),
    )
    document_title: str = 'RECEITA MÉDICA'
    signature_caption: str = 'Assinatura e Carimbo do Médico'

    # Replication
    max_replication_months: int = 12

    # Page geometry (millimetres)
    page_margin: float = 20.0
    line_height: float = 6.0
    entry_gap: float = 3.0
    signature_offset: float = 60.0
    wrap_char_width: float = 2.2

    # PDF export
    pdf_font_name: str = 'Helvetica'
    pdf_bold_font_name: str = 'Helvetica-Bold'
    pdf_producer: str = 'SISMED'

    def header_line_items(self) -> list[str]:
        items: list[str] = []
        for item in self.header_lines.replace('\\,', '\0').split(','):
            normalized = item.replace('\0', ',').strip()
            if not normalized:
                continue
            items.append(normalized)
        return items

    def layout(self) -> LayoutSettings:
        return LayoutSettings(
            header_lines=tuple(self.header_line_items()),
            document_title=self.document_title,
            signature_caption=self.signature_caption,
            margin=self.page_margin,
            line_height=self.line_height,
            entry_gap=self.entry_gap,
            signature_offset=self.signature_offset,
            char_width=self.wrap_char_width,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
