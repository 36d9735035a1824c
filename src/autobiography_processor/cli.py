"""CLI 인터페이스

Typer 기반 개발용 명령줄 도구, Rich 기반 출력
저장된 자서전 content 파일(평문 또는 {"chapters": [...]} JSON)을 파싱해서 확인한다.
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

from autobiography_processor.config.loader import get_config, load_config
from autobiography_processor.navigation.render import build_pages
from autobiography_processor.structure.errors import StructureError
from autobiography_processor.structure.exporter import estimate_reading_time, to_markdown, word_count
from autobiography_processor.structure.model import Chapter, chapters_to_dict
from autobiography_processor.structure.normalizer import load_chapters
from autobiography_processor.utils.logger import get_logger, setup_logging

logger = get_logger(__name__)
console = Console()
app = typer.Typer(help="Autobiography Processor - 자서전 구조 파싱 도구")


def _load(path: Path, config_path: Optional[Path]) -> List[Chapter]:
    if not path.exists():
        console.print(f"[red]❌ 파일을 찾을 수 없습니다: {path}[/red]")
        raise typer.Exit(code=1)

    config = load_config(str(config_path)) if config_path else get_config()
    setup_logging(config.logging.file_level, config.logging.console_level)
    try:
        return load_chapters(path.read_bytes(), config=config.parser)
    except StructureError as e:
        logger.error(f"Invalid structured content: {path} - {e}")
        console.print(f"[red]❌ 구조 형식 오류: {e}[/red]")
        raise typer.Exit(code=1)


@app.command()
def inspect(
    path: Path = typer.Argument(..., help="content 파일 (평문 또는 JSON)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """챕터/섹션 구조를 트리로 출력"""
    chapters = _load(path, config_path)
    console.print(Panel.fit(f"📖 {path.name}", style="bold blue"))

    if not chapters:
        console.print("[yellow]⚠️  내용이 없습니다.[/yellow]")
        return

    tree = Tree("목차")
    for chapter in chapters:
        branch = tree.add(f"[bold cyan]{chapter.title}[/bold cyan] [dim]({chapter.id})[/dim]")
        for section in chapter.sections:
            if section.is_quote:
                label = f"[magenta]❝ {section.plain_text}[/magenta]"
            else:
                label = section.title or "[dim](제목 없음)[/dim]"
            blank = " [red](빈 섹션)[/red]" if section.is_blank() else ""
            branch.add(f"{label} [dim]({section.id})[/dim]{blank}")
    console.print(tree)


@app.command()
def export(
    path: Path = typer.Argument(..., help="content 파일 (평문 또는 JSON)"),
    output: Optional[Path] = typer.Option(None, "--output", "-o", help="저장할 JSON 경로 (없으면 표준 출력)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """{"chapters": [...]} JSON으로 변환"""
    chapters = _load(path, config_path)
    payload = json.dumps(chapters_to_dict(chapters), ensure_ascii=False, indent=2)

    if output is None:
        typer.echo(payload)
        return
    output.write_text(payload, encoding="utf-8")
    console.print(f"✅ 저장 완료: [green]{output}[/green]")


@app.command()
def markdown(
    path: Path = typer.Argument(..., help="content 파일 (평문 또는 JSON)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """유사 마크다운 텍스트로 변환"""
    chapters = _load(path, config_path)
    typer.echo(to_markdown(chapters), nl=False)


@app.command()
def stats(
    path: Path = typer.Argument(..., help="content 파일 (평문 또는 JSON)"),
    config_path: Optional[Path] = typer.Option(None, "--config", "-c", help="설정 파일 경로")
):
    """챕터별 분량과 읽는 시간"""
    chapters = _load(path, config_path)

    table = Table(title="자서전 분량")
    table.add_column("챕터", style="cyan")
    table.add_column("섹션", style="green", justify="right")
    table.add_column("페이지", style="green", justify="right")
    table.add_column("단어", style="yellow", justify="right")
    table.add_column("읽는 시간(분)", style="yellow", justify="right")

    for chapter in chapters:
        pages = [page for page in build_pages([chapter]) if page.section is not None]
        table.add_row(
            chapter.title,
            str(len(chapter.sections)),
            str(len(pages)),
            str(word_count([chapter])),
            str(estimate_reading_time([chapter]))
        )

    console.print(table)
    console.print(f"\n총 읽는 시간: 약 [bold]{estimate_reading_time(chapters)}[/bold]분")


if __name__ == "__main__":
    app()
