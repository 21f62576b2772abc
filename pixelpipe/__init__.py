"""
pixelpipe - 逐像素图像变换管线
"""

from .pixelbuffer import InvalidBufferError, PixelBuffer, PixelMapper, map_pixels
from .colorspace import ColorSpaceConverter
from .channel import ChannelExtractor, Thresholder, extract_channel, threshold
from .gridlayout import GridLayout
from .gesture import GestureClassifier, landmarks_to_annotations
from .detection import DetectionWorker, FaceBox, LatestResult
from .imagefilter import FilterController, ImageFilter
from .pipeline import FrameSettings, Panel, ProcessingPipeline

__all__ = [
    'InvalidBufferError',
    'PixelBuffer',
    'PixelMapper',
    'map_pixels',
    'ColorSpaceConverter',
    'ChannelExtractor',
    'Thresholder',
    'extract_channel',
    'threshold',
    'GridLayout',
    'GestureClassifier',
    'landmarks_to_annotations',
    'DetectionWorker',
    'FaceBox',
    'LatestResult',
    'FilterController',
    'ImageFilter',
    'FrameSettings',
    'Panel',
    'ProcessingPipeline',
]
