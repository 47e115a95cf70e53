"""Compiled-in catalog of compilation targets."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from enum import Enum
from typing import Dict, Tuple


class Platform(str, Enum):
    WEB = "web"
    MOBILE = "mobile"
    DESKTOP = "desktop"
    BACKEND = "backend"
    EMBEDDED = "embedded"


class Framework(str, Enum):
    """Known frameworks. Several have no template set yet and fall back to the web set."""

    REACT = "react"
    VUE = "vue"
    ANGULAR = "angular"
    SVELTE = "svelte"
    IOS_SWIFT = "ios-swift"
    ANDROID_KOTLIN = "android-kotlin"
    FLUTTER = "flutter"
    REACT_NATIVE = "react-native"
    ELECTRON = "electron"
    NODEJS = "nodejs"
    PYTHON = "python"
    JAVA = "java"
    GO = "go"
    RUST = "rust"


class Language(str, Enum):
    TYPESCRIPT = "typescript"
    JAVASCRIPT = "javascript"
    SWIFT = "swift"
    KOTLIN = "kotlin"
    PYTHON = "python"
    JAVA = "java"
    GO = "go"
    RUST = "rust"
    DART = "dart"


class Maturity(str, Enum):
    EXPERIMENTAL = "experimental"
    BETA = "beta"
    STABLE = "stable"
    MATURE = "mature"


class OptimizationCategory(str, Enum):
    PERFORMANCE = "performance"
    MEMORY = "memory"
    SIZE = "size"
    BATTERY = "battery"


class Impact(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


# Fraction of the affected metric an optimization removes.
IMPACT_FACTORS: Dict[Impact, float] = {
    Impact.LOW: 0.05,
    Impact.MEDIUM: 0.10,
    Impact.HIGH: 0.20,
    Impact.CRITICAL: 0.30,
}

# Capability vocabulary shared by features, artifacts and requirements.
CAPABILITIES: Tuple[str, ...] = (
    "components",
    "routing",
    "state",
    "async",
    "security",
    "persistence",
    "concurrency",
)


@dataclass(frozen=True)
class PerformanceMetrics:
    """Compile time (ms), output size (bytes), execution speed score, memory (MB), startup (ms)."""

    compilation_time: float
    output_size: float
    execution_speed: float
    memory_usage: float
    startup_time: float


@dataclass(frozen=True)
class FeatureProfile:
    speed: int
    efficiency: int
    reliability: int
    scalability: int


@dataclass(frozen=True)
class Feature:
    id: str
    name: str
    implementation: str
    capabilities: Tuple[str, ...]
    profile: FeatureProfile


@dataclass(frozen=True)
class Optimization:
    id: str
    name: str
    category: OptimizationCategory
    impact: Impact
    technique: str

    @property
    def factor(self) -> float:
        return IMPACT_FACTORS[self.impact]


@dataclass(frozen=True)
class Target:
    id: str
    name: str
    platform: Platform
    framework: Framework
    language: Language
    maturity: Maturity
    baseline: PerformanceMetrics
    features: Tuple[Feature, ...] = ()
    optimizations: Tuple[Optimization, ...] = ()

    @property
    def capabilities(self) -> frozenset[str]:
        return frozenset(cap for feature in self.features for cap in feature.capabilities)

    @property
    def has_user_interface(self) -> bool:
        return self.platform in (Platform.WEB, Platform.MOBILE, Platform.DESKTOP)


def describe_target(target: Target) -> Dict[str, object]:
    """JSON-ready summary of a target for listings."""
    return {
        "id": target.id,
        "name": target.name,
        "platform": target.platform.value,
        "framework": target.framework.value,
        "language": target.language.value,
        "maturity": target.maturity.value,
        "capabilities": sorted(target.capabilities),
        "features": [feature.id for feature in target.features],
        "optimizations": [
            {
                "id": optimization.id,
                "category": optimization.category.value,
                "impact": optimization.impact.value,
                "technique": optimization.technique,
            }
            for optimization in target.optimizations
        ],
        "baseline": asdict(target.baseline),
    }


def _feature(
    feature_id: str,
    name: str,
    implementation: str,
    capabilities: Tuple[str, ...],
    profile: Tuple[int, int, int, int],
) -> Feature:
    return Feature(
        id=feature_id,
        name=name,
        implementation=implementation,
        capabilities=capabilities,
        profile=FeatureProfile(*profile),
    )


def _optimization(
    optimization_id: str,
    name: str,
    category: OptimizationCategory,
    impact: Impact,
    technique: str,
) -> Optimization:
    return Optimization(
        id=optimization_id, name=name, category=category, impact=impact, technique=technique
    )


_PERF = OptimizationCategory.PERFORMANCE
_MEM = OptimizationCategory.MEMORY
_SIZE = OptimizationCategory.SIZE
_BATTERY = OptimizationCategory.BATTERY


DEFAULT_CATALOG: Tuple[Target, ...] = (
    Target(
        id="web-react",
        name="React Web Application",
        platform=Platform.WEB,
        framework=Framework.REACT,
        language=Language.TYPESCRIPT,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(1200, 2_500_000, 95, 50, 800),
        features=(
            _feature("react-components", "Component-Based Architecture",
                     "Functional components with hooks", ("components", "routing"), (95, 90, 95, 88)),
            _feature("react-state", "State Management",
                     "React Context and useReducer", ("state", "async", "security"), (88, 85, 92, 80)),
        ),
        optimizations=(
            _optimization("react-memo", "Component Memoization", _PERF, Impact.MEDIUM,
                          "React.memo and useMemo hooks"),
            _optimization("react-lazy", "Lazy Loading", _PERF, Impact.HIGH, "React.lazy and Suspense"),
            _optimization("react-tree-shaking", "Tree Shaking", _SIZE, Impact.MEDIUM,
                          "ES module tree shaking and code splitting"),
        ),
    ),
    Target(
        id="web-vue",
        name="Vue.js Web Application",
        platform=Platform.WEB,
        framework=Framework.VUE,
        language=Language.TYPESCRIPT,
        maturity=Maturity.STABLE,
        baseline=PerformanceMetrics(1000, 2_200_000, 90, 45, 700),
        features=(
            _feature("vue-components", "Vue Components",
                     "Composition API with reactive state", ("components", "routing"), (90, 88, 92, 85)),
            _feature("vue-reactivity", "Reactivity System",
                     "ref, reactive, computed", ("state", "async", "security"), (92, 90, 94, 88)),
        ),
        optimizations=(
            _optimization("vue-computed", "Computed Properties", _PERF, Impact.MEDIUM,
                          "Computed properties with caching"),
            _optimization("vue-async", "Async Components", _PERF, Impact.HIGH, "defineAsyncComponent"),
            _optimization("vue-tree-shaking", "Tree Shaking", _SIZE, Impact.MEDIUM,
                          "Vite production build with tree shaking"),
        ),
    ),
    Target(
        id="web-angular",
        name="Angular Web Application",
        platform=Platform.WEB,
        framework=Framework.ANGULAR,
        language=Language.TYPESCRIPT,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(1800, 3_200_000, 85, 65, 1200),
        features=(
            _feature("angular-components", "Angular Components",
                     "Components with DI and services", ("components", "routing", "security"),
                     (85, 82, 95, 90)),
            _feature("angular-rxjs", "RxJS Integration",
                     "Observables and operators", ("state", "async"), (80, 78, 90, 92)),
        ),
        optimizations=(
            _optimization("angular-change-detection", "Change Detection", _PERF, Impact.HIGH,
                          "OnPush change detection"),
            _optimization("angular-lazy", "Lazy Loading", _PERF, Impact.HIGH,
                          "RouterModule lazy loading"),
            _optimization("angular-aot", "Ahead-of-Time Compilation", _SIZE, Impact.HIGH,
                          "AOT compilation with build optimizer"),
        ),
    ),
    Target(
        id="mobile-ios-swift",
        name="iOS Swift Application",
        platform=Platform.MOBILE,
        framework=Framework.IOS_SWIFT,
        language=Language.SWIFT,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(2500, 15_000_000, 98, 80, 500),
        features=(
            _feature("ios-swiftui", "SwiftUI Interface",
                     "SwiftUI views and modifiers", ("components", "routing"), (98, 95, 98, 92)),
            _feature("ios-combine", "Combine Framework",
                     "Publishers and subscribers", ("state", "async", "security"), (94, 92, 96, 90)),
        ),
        optimizations=(
            _optimization("ios-swift-performance", "Swift Performance", _PERF, Impact.HIGH,
                          "Whole module optimization"),
            _optimization("ios-memory", "Memory Management", _MEM, Impact.HIGH,
                          "Automatic Reference Counting"),
            _optimization("ios-background", "Background Scheduling", _BATTERY, Impact.MEDIUM,
                          "BGTaskScheduler deferred work"),
        ),
    ),
    Target(
        id="mobile-android-kotlin",
        name="Android Kotlin Application",
        platform=Platform.MOBILE,
        framework=Framework.ANDROID_KOTLIN,
        language=Language.KOTLIN,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(2200, 12_000_000, 96, 75, 600),
        features=(
            _feature("android-jetpack", "Jetpack Compose",
                     "Compose functions and modifiers", ("components", "routing"), (96, 93, 96, 90)),
            _feature("android-coroutines", "Kotlin Coroutines",
                     "Coroutines and flow", ("state", "async", "security"), (94, 91, 95, 92)),
        ),
        optimizations=(
            _optimization("android-compose", "Compose Performance", _PERF, Impact.HIGH,
                          "Remember and derivedState"),
            _optimization("android-memory", "Memory Optimization", _MEM, Impact.HIGH,
                          "Memory leaks detection"),
            _optimization("android-work-batching", "Work Batching", _BATTERY, Impact.MEDIUM,
                          "WorkManager constraints and batching"),
        ),
    ),
    Target(
        id="backend-nodejs",
        name="Node.js Backend",
        platform=Platform.BACKEND,
        framework=Framework.NODEJS,
        language=Language.TYPESCRIPT,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(800, 800_000, 88, 120, 300),
        features=(
            _feature("nodejs-async", "Asynchronous I/O",
                     "Async/await and promises", ("async", "security"), (88, 92, 90, 95)),
            _feature("nodejs-modules", "Module System",
                     "Import/export system", ("components", "routing"), (90, 88, 92, 90)),
        ),
        optimizations=(
            _optimization("nodejs-cluster", "Cluster Mode", _PERF, Impact.HIGH, "Node.js cluster module"),
            _optimization("nodejs-cache", "Caching", _PERF, Impact.MEDIUM, "Redis or memory cache"),
        ),
    ),
    Target(
        id="backend-python",
        name="Python Backend",
        platform=Platform.BACKEND,
        framework=Framework.PYTHON,
        language=Language.PYTHON,
        maturity=Maturity.STABLE,
        baseline=PerformanceMetrics(500, 600_000, 82, 100, 400),
        features=(
            _feature("python-asyncio", "Asyncio Support",
                     "Async/await syntax", ("async",), (82, 85, 88, 85)),
            _feature("python-frameworks", "Web Frameworks",
                     "Framework-specific code generation", ("components", "routing", "security"),
                     (80, 82, 90, 88)),
        ),
        optimizations=(
            _optimization("python-cython", "Cython Optimization", _PERF, Impact.MEDIUM,
                          "Cython compilation"),
            _optimization("python-gunicorn", "Gunicorn Workers", _PERF, Impact.HIGH,
                          "Gunicorn with worker class"),
        ),
    ),
    Target(
        id="backend-java",
        name="Java Spring Backend",
        platform=Platform.BACKEND,
        framework=Framework.JAVA,
        language=Language.JAVA,
        maturity=Maturity.MATURE,
        baseline=PerformanceMetrics(3000, 2_000_000, 92, 150, 1000),
        features=(
            _feature("java-spring", "Spring Framework",
                     "Spring Boot auto-configuration", ("components", "routing", "security"),
                     (92, 88, 98, 95)),
            _feature("java-jvm", "JVM Optimization",
                     "JIT compilation and GC", ("async", "concurrency"), (90, 85, 96, 92)),
        ),
        optimizations=(
            _optimization("java-jit", "JIT Compilation", _PERF, Impact.HIGH, "JVM JIT compiler"),
            _optimization("java-gc", "Garbage Collection", _MEM, Impact.HIGH, "G1 garbage collector"),
        ),
    ),
)


__all__ = [
    "CAPABILITIES",
    "DEFAULT_CATALOG",
    "Feature",
    "FeatureProfile",
    "Framework",
    "IMPACT_FACTORS",
    "Impact",
    "Language",
    "Maturity",
    "Optimization",
    "OptimizationCategory",
    "PerformanceMetrics",
    "Platform",
    "Target",
    "describe_target",
]
