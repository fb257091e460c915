"""変換状態・入力・LOD 規則・グリッド線生成（描画面に依存しない純粋な層）。"""
