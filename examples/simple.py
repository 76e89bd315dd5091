import asyncio
import os
import re
import sys
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv

load_dotenv()

from playwright.async_api import async_playwright

from locator_assertions import configure_logging, expect

configure_logging()

PAGE = """
<ul id="todos">
	<li class="todo done">Buy milk</li>
	<li class="todo">Write report</li>
</ul>
<input id="name" value="Ada">
<button id="save" disabled>Save</button>
<script>
	setTimeout(() => {
		const item = document.createElement('li');
		item.className = 'todo';
		item.textContent = 'Call  Bob';
		document.getElementById('todos').appendChild(item);
		document.getElementById('save').disabled = false;
	}, 500);
</script>
"""


async def main():
	async with async_playwright() as p:
		browser = await p.chromium.launch(headless=True)
		page = await browser.new_page()
		await page.set_content(PAGE)

		todos = page.locator('#todos li')
		await expect(todos).to_have_count(3)
		await expect(todos).to_have_text(['Buy milk', 'Write report', 'Call Bob'])
		await expect(todos.first).to_have_class(re.compile('done'))
		await expect(page.locator('#name')).to_have_value('Ada')
		await expect(page.locator('#save')).to_be_enabled()
		await expect(page.locator('#missing')).not_().to_be_visible(timeout=1000)

		await browser.close()


if __name__ == '__main__':
	asyncio.run(main())
