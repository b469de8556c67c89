from .bb import BBExtractor, BB2Extractor
from .bradesco import BradescoExtractor
from .btg import BTGExtractor
from .cora import CoraExtractor
from .itau import ItauExtractor, Itau2Extractor
from .nubank import NubankExtractor
from .pagseguro import PagSeguroExtractor
from .safra import SafraExtractor, Safra2Extractor
from .santander import SantanderExtractor, Santander2Extractor, Santander3Extractor
from .sicoob import SicoobExtractor, Sicoob2Extractor, Sicoob3Extractor
from .sicredi import SicrediExtractor, Sicredi2Extractor
from .sisprime import SisprimeExtractor
from .stone import StoneExtractor
from .xp import XPExtractor

EXTRACTORS = {
    'sicoob': SicoobExtractor,
    'sicoob2': Sicoob2Extractor,
    'sicoob3': Sicoob3Extractor,
    'sicredi': SicrediExtractor,
    'sicredi2': Sicredi2Extractor,
    'itau': ItauExtractor,
    'itau2': Itau2Extractor,
    'bradesco': BradescoExtractor,
    'safra': SafraExtractor,
    'safra2': Safra2Extractor,
    'santander': SantanderExtractor,
    'santander2': Santander2Extractor,
    'santander3': Santander3Extractor,
    'xp': XPExtractor,
    'bb': BBExtractor,
    'bb2': BB2Extractor,
    'pagseguro': PagSeguroExtractor,
    'stone': StoneExtractor,
    'sisprime2': SisprimeExtractor,
    'cora': CoraExtractor,
    'nubank': NubankExtractor,
    'btg': BTGExtractor,
}

__all__ = [
    'EXTRACTORS',
    'BBExtractor',
    'BB2Extractor',
    'BradescoExtractor',
    'BTGExtractor',
    'CoraExtractor',
    'ItauExtractor',
    'Itau2Extractor',
    'NubankExtractor',
    'PagSeguroExtractor',
    'SafraExtractor',
    'Safra2Extractor',
    'SantanderExtractor',
    'Santander2Extractor',
    'Santander3Extractor',
    'SicoobExtractor',
    'Sicoob2Extractor',
    'Sicoob3Extractor',
    'SicrediExtractor',
    'Sicredi2Extractor',
    'SisprimeExtractor',
    'StoneExtractor',
    'XPExtractor',
]
