from .bias import BiasEvaluator
from .emotion import AdvancedEmotionScorer, BasicEmotionScorer, EmotionAnalyzer
from .lexical import LexicalTagger, RuleBasedTagger, WordClass
from .loops import LoopClusterer
from .patterns import PatternAnalyzer
from .predictions import Predictor
from .pruning import PruningScorer

__all__ = [
    "AdvancedEmotionScorer",
    "BasicEmotionScorer",
    "BiasEvaluator",
    "EmotionAnalyzer",
    "LexicalTagger",
    "LoopClusterer",
    "PatternAnalyzer",
    "Predictor",
    "PruningScorer",
    "RuleBasedTagger",
    "WordClass",
]
