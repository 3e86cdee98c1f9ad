"""
問診票OCRテキスト解析

OCRで得た雑多なテキストから顧客レコード（氏名・ふりがな・住所・電話番号・
来店きっかけなど）を再構成する。

設定ファイルの読み込みを伴うモジュールは遅延インポートとし、
パッケージの import 時に設定を読まないようにする。
"""

# 遅延インポート（必要時に __getattr__ で解決）
__all__ = [
    'reconcile',
    'parse_ocr_text',
    'build_debug_view',
    'detect_source_type',
    'collect_candidates',
    'separate_full_name',
    'separate_furigana',
    'generate_furigana',
]

def __getattr__(name):
    if name in ('reconcile', 'parse_ocr_text', 'build_debug_view'):
        from . import record_assembler  # type: ignore
        return getattr(record_assembler, name)
    if name == 'detect_source_type':
        from .source_detector import detect_source_type  # type: ignore
        return detect_source_type
    if name == 'collect_candidates':
        from .candidate_collector import collect_candidates  # type: ignore
        return collect_candidates
    if name in ('separate_full_name', 'separate_furigana'):
        from . import name_segmenter  # type: ignore
        return getattr(name_segmenter, name)
    if name == 'generate_furigana':
        from .furigana import generate_furigana  # type: ignore
        return generate_furigana
    raise AttributeError(name)
