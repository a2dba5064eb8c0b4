"""설정된 로봇으로 모든 종류의 메시지를 한 번씩 보내는 스모크 스크립트."""

import asyncio
from pathlib import Path
from typing import Optional

import typer

from dingrobot import (
    ActionCardButton,
    ActionCardMessage,
    DingRobotError,
    DingTalkRobot,
    FeedCardMessage,
)
from dingrobot.logging import get_logger

app = typer.Typer(add_completion=False, help="DingTalk/WeChat Work 로봇 메시지 스모크")

SAMPLE_URL = "https://www.dingtalk.com/"
SAMPLE_PIC_URL = "https://img.alicdn.com/tfs/TB1NwmBEL9TBuNjy1zbXXXpepXa-2400-1218.png"


async def _send_samples(robot: DingTalkRobot, text_only: bool) -> None:
    logger = get_logger("dingrobot.samples", console_output=True)
    try:
        await robot.send_text("test message 001 ---------------------")
        if text_only:
            return

        await robot.send_markdown(
            "markdown title 001",
            "# markdown content 001\n* line 0\n* line 1\n* line 2",
        )
        await robot.send_link("link title 001", "link content 001", SAMPLE_PIC_URL, SAMPLE_URL)
        await robot.send_message(
            FeedCardMessage()
            .add_link_detail("test feed card title 001", SAMPLE_URL, SAMPLE_PIC_URL)
            .add_link_detail("test feed card title 002", SAMPLE_URL, SAMPLE_PIC_URL)
        )
        await robot.send_message(
            ActionCardMessage(title="action card 001", text="action card text 001").set_single_button(
                ActionCardButton(title="single button", action_url=SAMPLE_URL)
            )
        )
        await robot.send_message(
            ActionCardMessage(title="action card 002", text="action card text 002")
            .add_button(ActionCardButton(title="button 01", action_url=SAMPLE_URL))
            .add_button(ActionCardButton(title="button 02", action_url=SAMPLE_URL))
        )
        logger.info("모든 샘플 메시지 전송 완료")
    except DingRobotError as exc:
        logger.error("샘플 메시지 전송 실패", error=repr(exc))
        raise typer.Exit(code=1) from exc
    finally:
        await robot.aclose()


@app.command()
def main(
    token_file: Optional[Path] = typer.Option(
        None,
        help="JSON 설정 파일 경로 (미지정 시 DINGTALK_* 환경변수 사용)",
    ),
    token: Optional[str] = typer.Option(
        None,
        help="dingtalk:<token>[?<secret>] 또는 wechatwork:<key> 형식 토큰",
    ),
    text_only: bool = typer.Option(False, help="텍스트 메시지만 전송 (WeChat Work 용)"),
) -> None:
    if token:
        robot = DingTalkRobot.from_token(token)
    elif token_file:
        robot = DingTalkRobot.from_file(token_file)
    else:
        robot = DingTalkRobot.from_settings()
    if robot.config.is_compatibility_mode:
        text_only = True
    asyncio.run(_send_samples(robot, text_only))


if __name__ == "__main__":
    app()
