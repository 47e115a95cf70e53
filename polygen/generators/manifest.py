"""Configuration files, dependencies and build commands per framework."""

from __future__ import annotations

from dataclasses import dataclass
import json
from typing import Dict, List, Tuple

from ..models import BuildScript, ConfigurationFile, Dependency
from ..spec.model import Specification
from ..targets.catalog import Framework, Target
from .conventions import kebab_case, pascal_case, snake_case
from .templates import TemplateLibrary


@dataclass(frozen=True)
class Manifest:
    configuration: Tuple[ConfigurationFile, ...]
    dependencies: Tuple[Dependency, ...]
    build_scripts: Tuple[BuildScript, ...]

    def command(self, name: str) -> str:
        for script in self.build_scripts:
            if script.name == name:
                return script.command
        raise KeyError(name)


def _commands(install: str, dev: str, build: str) -> Tuple[BuildScript, ...]:
    return (
        BuildScript("install", install),
        BuildScript("dev", dev),
        BuildScript("build", build),
    )


_TYPESCRIPT_DEV = Dependency("typescript", "^5.0.0", "dev")


def framework_packages(framework: Framework) -> Tuple[Tuple[Dependency, ...], Tuple[BuildScript, ...]]:
    """Dependencies and the install/dev/build triple; unmapped frameworks use the web default."""
    match framework:
        case Framework.VUE:
            return (
                (
                    Dependency("vue", "^3.3.0"),
                    Dependency("vue-router", "^4.2.0"),
                    _TYPESCRIPT_DEV,
                    Dependency("vite", "^5.0.0", "dev"),
                ),
                _commands("npm install", "npm run serve", "npm run build"),
            )
        case Framework.ANGULAR:
            return (
                (
                    Dependency("@angular/core", "^17.0.0"),
                    Dependency("@angular/common", "^17.0.0"),
                    Dependency("@angular/router", "^17.0.0"),
                    Dependency("rxjs", "^7.8.0"),
                    _TYPESCRIPT_DEV,
                ),
                _commands("npm install", "ng serve", "ng build"),
            )
        case Framework.IOS_SWIFT:
            return (
                (
                    Dependency("SwiftUI", "system", "system"),
                    Dependency("Combine", "system", "system"),
                ),
                _commands(
                    "pod install",
                    "xcodebuild -scheme App -configuration Debug build",
                    "xcodebuild -scheme App -configuration Release archive",
                ),
            )
        case Framework.ANDROID_KOTLIN:
            return (
                (
                    Dependency("androidx.compose.ui:ui", "1.5.4"),
                    Dependency("androidx.lifecycle:lifecycle-viewmodel-compose", "2.6.2"),
                    Dependency("org.jetbrains.kotlinx:kotlinx-coroutines-android", "1.7.3"),
                ),
                _commands("./gradlew dependencies", "./gradlew assembleDebug", "./gradlew assembleRelease"),
            )
        case Framework.NODEJS:
            return (
                (
                    Dependency("express", "^4.18.2"),
                    _TYPESCRIPT_DEV,
                    Dependency("@types/express", "^4.17.21", "dev"),
                    Dependency("ts-node-dev", "^2.0.0", "dev"),
                ),
                _commands("npm install", "npm run dev", "npm run build"),
            )
        case Framework.PYTHON:
            return (
                (
                    Dependency("fastapi", "^0.104.0"),
                    Dependency("sqlalchemy", "^2.0.0"),
                    Dependency("uvicorn", "^0.24.0"),
                ),
                _commands(
                    "pip install -r requirements.txt",
                    "uvicorn app.main:app --reload",
                    "python -m build",
                ),
            )
        case Framework.JAVA:
            return (
                (
                    Dependency("org.springframework.boot:spring-boot-starter-web", "3.2.0"),
                    Dependency("org.springframework.boot:spring-boot-starter-data-jpa", "3.2.0"),
                ),
                _commands("mvn install", "mvn spring-boot:run", "mvn clean package"),
            )
        case _:
            return (
                (
                    Dependency("react", "^18.2.0"),
                    Dependency("react-dom", "^18.2.0"),
                    _TYPESCRIPT_DEV,
                    Dependency("@types/react", "^18.2.0", "dev"),
                ),
                _commands("npm install", "npm start", "npm run build"),
            )


def build_manifest(spec: Specification, target: Target, templates: TemplateLibrary) -> Manifest:
    dependencies, scripts = framework_packages(target.framework)
    context = {
        "spec": spec.metadata,
        "target": target,
        "package": kebab_case(spec.metadata.name) or "app",
        "module": snake_case(spec.metadata.name) or "app",
        "app_name": pascal_case(spec.metadata.name) or "App",
        "dependencies": [item for item in dependencies if item.scope == "runtime"],
        "dev_dependencies": [item for item in dependencies if item.scope == "dev"],
    }

    configuration: List[ConfigurationFile] = []
    match target.framework:
        case Framework.IOS_SWIFT:
            configuration.append(
                ConfigurationFile("Info.plist", "xml", templates.render("manifest/Info.plist.j2", **context))
            )
        case Framework.ANDROID_KOTLIN:
            configuration.append(
                ConfigurationFile(
                    "app/build.gradle.kts", "gradle", templates.render("manifest/build.gradle.kts.j2", **context)
                )
            )
        case Framework.PYTHON:
            configuration.append(
                ConfigurationFile(
                    "pyproject.toml", "toml", templates.render("manifest/pyproject.toml.j2", **context)
                )
            )
            configuration.append(
                ConfigurationFile(
                    "requirements.txt",
                    "text",
                    "".join(f"{item.name}>={item.version.lstrip('^')}\n" for item in dependencies),
                )
            )
        case Framework.JAVA:
            configuration.append(
                ConfigurationFile("pom.xml", "xml", templates.render("manifest/pom.xml.j2", **context))
            )
        case _:
            configuration.append(
                ConfigurationFile(
                    "package.json",
                    "json",
                    _package_json(spec, str(context["package"]), dependencies, target.framework),
                )
            )
            if target.framework == Framework.ANGULAR:
                configuration.append(
                    ConfigurationFile("angular.json", "json", _angular_json(context["package"]))
                )
            if target.framework == Framework.NODEJS:
                configuration.append(ConfigurationFile("tsconfig.json", "json", _tsconfig_json()))

    return Manifest(
        configuration=tuple(configuration),
        dependencies=dependencies,
        build_scripts=scripts,
    )


def _package_json(
    spec: Specification, package: str, dependencies: Tuple[Dependency, ...], framework: Framework
) -> str:
    payload = {
        "name": package,
        "version": spec.metadata.version,
        "private": True,
        "scripts": _npm_scripts(framework),
        "dependencies": {item.name: item.version for item in dependencies if item.scope == "runtime"},
        "devDependencies": {item.name: item.version for item in dependencies if item.scope == "dev"},
    }
    return json.dumps(payload, indent=2) + "\n"


def _npm_scripts(framework: Framework) -> Dict[str, str]:
    match framework:
        case Framework.VUE:
            return {"serve": "vite", "build": "vite build"}
        case Framework.ANGULAR:
            return {"start": "ng serve", "build": "ng build"}
        case Framework.NODEJS:
            return {"dev": "ts-node-dev src/index.ts", "build": "tsc -p .", "start": "node dist/index.js"}
        case _:
            return {"start": "react-scripts start", "build": "react-scripts build"}


def _angular_json(package: object) -> str:
    payload = {
        "version": 1,
        "projects": {
            str(package): {
                "projectType": "application",
                "root": "",
                "sourceRoot": "src",
                "architect": {
                    "build": {"builder": "@angular-devkit/build-angular:browser"},
                    "serve": {"builder": "@angular-devkit/build-angular:dev-server"},
                },
            }
        },
    }
    return json.dumps(payload, indent=2) + "\n"


def _tsconfig_json() -> str:
    payload = {
        "compilerOptions": {
            "target": "ES2022",
            "module": "commonjs",
            "outDir": "dist",
            "strict": True,
            "esModuleInterop": True,
        },
        "include": ["src"],
    }
    return json.dumps(payload, indent=2) + "\n"


__all__ = ["Manifest", "build_manifest", "framework_packages"]
