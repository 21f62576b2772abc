"""
网格布局 - 计算单元格左上角坐标
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class GridLayout:
    """
    x = base_x + col * (cell_width + padding_x)
    y = base_y + row * (cell_height + padding_y)
    不做边界检查，负数或越界的行列直接外推
    """
    base_x: int
    base_y: int
    cell_width: int
    cell_height: int
    padding_x: int = 0
    padding_y: int = 0

    def get_position(self, col: int, row: int) -> Tuple[int, int]:
        x = self.base_x + col * (self.cell_width + self.padding_x)
        y = self.base_y + row * (self.cell_height + self.padding_y)
        return x, y
