"""Constants for the TermiView codec core."""

import struct

# Block image codec ('jpeg' mode): 'TVBC' (TermiView Block Codec)
BLOCK_MAGIC = b'TVBC'
BLOCK_VERSION = 0x01

# Block size for the block DCT
BLOCK_SIZE = 8

# Block codec header (Little-endian, 19 bytes total)
# 4s: Magic (4B), B: Version (1B), H: Height (2B), H: Width (2B)
# B: Quality (1B), B: Flags (1B), H: Pad_H (2B), H: Pad_W (2B)
# I: Data Length (4B)
BLOCK_HEADER_FORMAT = '<4sBHHBBHHI'
BLOCK_HEADER_SIZE = struct.calcsize(BLOCK_HEADER_FORMAT)  # 19 bytes

# Block codec flag bits
FLAG_DPCM = 0x01
FLAG_SIGNED = 0x02

# Entropy coding markers
MARKER_EOB = (0, 0)   # End of Block
MARKER_ZRL = (15, 0)  # Zero Run Length (16 consecutive zeros)

# Grayscale frames are 8-bit
BIT_DEPTH = 8
PIXEL_MAX = 255
CENTER_OFFSET = 128

# Residual range for signed (P-frame) input
RESIDUAL_MIN = -255
RESIDUAL_MAX = 255

# Whole-frame transform codecs
TRANSFORM_QUANT_STEP = 10.0
DCT_HEADER_FORMAT = '<ii'          # width, height
DCT_HEADER_SIZE = struct.calcsize(DCT_HEADER_FORMAT)
WAVELET_HEADER_FORMAT = '<iii'     # width, height, levels
WAVELET_HEADER_SIZE = struct.calcsize(WAVELET_HEADER_FORMAT)
DEFAULT_WAVELET_LEVELS = 3

# LZW
LZW_ALPHABET_SIZE = 256
LZW_MAX_DICT_SIZE = 4096
LZW_CODE_BIT_LEN = 12

# 32-bit range coder registers
RANGE_TOP = 0xFFFFFFFF
RANGE_HALF = 0x80000000
RANGE_QUARTER = 0x40000000
RANGE_THREE_QUARTERS = 0xC0000000
RANGE_CODE_BITS = 32

# Byte alphabet
NUM_SYMBOLS = 256

# RLE run limit (count stored in one byte)
RLE_MAX_RUN = 255

# Motion estimation defaults
DEFAULT_MOTION_BLOCK_SIZE = 8
DEFAULT_SEARCH_WINDOW = 4
MOTION_VECTOR_FORMAT = '<HHhh'     # block_x, block_y, dx, dy
MOTION_VECTOR_SIZE = struct.calcsize(MOTION_VECTOR_FORMAT)
# P-frame payload: B block size, then the vector field, then I residual length
P_FRAME_BLOCK_FORMAT = '<B'
P_FRAME_BLOCK_SIZE = struct.calcsize(P_FRAME_BLOCK_FORMAT)

# Default quality for the block image codec
DEFAULT_QUALITY = 75

# Video stream: 'TMV1'
VIDEO_MAGIC = b'TMV1'
VIDEO_VERSION = 0x01
# 4s: Magic, B: Version, H: Width, H: Height, I: Frame count,
# B: Block size, B: Search window, B: Quality
VIDEO_HEADER_FORMAT = '<4sBHHIBBB'
VIDEO_HEADER_SIZE = struct.calcsize(VIDEO_HEADER_FORMAT)
# B: Frame type, I: Payload length
FRAME_HEADER_FORMAT = '<BI'
FRAME_HEADER_SIZE = struct.calcsize(FRAME_HEADER_FORMAT)

# Frame types
I_FRAME = 0
P_FRAME = 1

# Mode container: 'TMVZ'
CONTAINER_MAGIC = b'TMVZ'
CONTAINER_VERSION = 0x01
# 4s: Magic, B: Version, B: Mode id, H: Width, H: Height,
# I: Original length, I: Side info length, I: Payload length
CONTAINER_HEADER_FORMAT = '<4sBBHHIII'
CONTAINER_HEADER_SIZE = struct.calcsize(CONTAINER_HEADER_FORMAT)

# Mode ids are the positions in this tuple
COMPRESSION_MODES = ('lzw', 'huffman', 'arithmetic', 'rle',
                     'dct_based', 'wavelet', 'jpeg')
BYTE_MODES = ('lzw', 'huffman', 'arithmetic', 'rle')
IMAGE_MODES = ('dct_based', 'wavelet', 'jpeg')

# Luma weights for RGB -> grayscale
LUMA_WEIGHTS = (0.299, 0.587, 0.114)
