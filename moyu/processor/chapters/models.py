from dataclasses import dataclass, field

# Numerales chinos admitidos en los encabezados ("第一百二十章").
CJK_NUMERALS = "一二三四五六七八九十百千万"


@dataclass
class SegmenterConfig:
    """Configuración del segmentador. Centralizada y explícita."""

    # Patrones de encabezado, en orden de prioridad. Se combinan en una
    # única alternancia: a igual posición gana el primero de la lista.
    heading_patterns: list[str] = field(default_factory=lambda: [
        rf'第\s*[{CJK_NUMERALS}\d]+\s*[章节回卷集]',   # 第一章 / 第 12 回
        r'第\s*\d+\s*[章节回卷集]',                   # 第12章
        r'Chapter\s*\d+',                             # Chapter 3 / chapter3
        r'\d+\s*[章节回卷集]',                        # 12章
        rf'[章节回卷集]\s*[{CJK_NUMERALS}\d]+',       # 卷三 / 章 4
        r'[章节回卷集]\s*\d+',                        # 节7
    ])

    # El texto anterior al primer encabezado (portada, prólogo sin título,
    # metadata del EPUB) se descarta salvo que esto sea True; en ese caso
    # se conserva como capítulo 0.
    keep_front_matter: bool = False
