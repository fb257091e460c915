"""描画ループ側の窓口（ビュー状態の保持・変更通知・見た目の補間）。"""
